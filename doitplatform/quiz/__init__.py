"""Quiz service: quizzes, questions and scored results backed by MongoDB."""