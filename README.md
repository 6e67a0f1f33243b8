# doitplatform

Backend services for a learning platform where quizzes are written, taken
and scored, and where course files are stored.

The package holds three parts:

- **`doitplatform.quiz`**: the quiz service. Quizzes, questions and submitted
  results are stored in MongoDB and served over a JSON HTTP API. When a result
  is submitted, the service looks up every answered question, counts the
  correct answers chosen and stores the score (correct answers divided by the
  total points of the answered questions) with the submission. The submission
  is rejected if those points do not add up to the quiz's stored total.
- **`doitplatform.content`**: the content service. It keeps uploaded files in
  an S3-compatible object store, creating the `files` bucket at start-up, and
  serves them over HTTP.
- **`doitplatform.gateway`**: configuration, a file use case and an HTTP
  server (with a `/health` route) for a public-facing file API that hands file
  requests to a presenter object you supply.

`doitplatform.logsetup.new_logger(name, directory, mode)` builds the logger
the content service uses: `release` writes JSON to stdout and `app.json`,
`debug` writes coloured console lines to stdout and `debug.log`, `test` writes
JSON to `test.log` only. Any other mode raises `LoggingModeError`.

## Installation

```console
pip install .
```

For development, with the test tools:

```console
pip install ".[test]"
pytest
```

## Quiz service

```console
doit-quiz
```

A `.env` file in the working directory is loaded if present; variables
already set in the environment win. The service reads:

| Variable                | Meaning                                          | Default   |
|-------------------------|--------------------------------------------------|-----------|
| `MONGO_DB_URI`          | MongoDB connection string                        |           |
| `MONGO_DB`              | database name                                    |           |
| `HTTP_PORT`             | port of the HTTP API (empty: any free port)      |           |
| `GIN_MODE`              | server mode: `release`, `debug` or `test`        | `release` |
| `GRPC_PORT`             | read and checked as a 32-bit integer, not used   | `0`       |
| `ZAP_LOGGING_MODE`      | `release`, `debug` or `test`                     | `./logs`  |
| `ZAP_LOGGING_DIRECTORY` | prefix of the log file names                     | `./logs`  |

`ZAP_LOGGING_MODE` has to be set: its default is not a valid mode, and the
service then stops with `unknown logging mode`. The log file name is appended
to `ZAP_LOGGING_DIRECTORY` as it is, so end the directory with a path
separator (for example `./logs/`); the directory must already exist.

The service connects to MongoDB and pings it before it starts serving, then
runs until it receives SIGINT or SIGTERM and shuts down gracefully.

The HTTP API is mounted under `/api/v1`:

| Method   | Path                        | Action                           |
|----------|-----------------------------|----------------------------------|
| `POST`   | `/quizzes/`                 | create a quiz                    |
| `GET`    | `/quizzes/<id>`             | quiz with its questions          |
| `PUT`    | `/quizzes/<id>`             | update a quiz                    |
| `DELETE` | `/quizzes/<id>`             | delete a quiz                    |
| `POST`   | `/questions/`               | create a question                |
| `POST`   | `/questions/many`           | create several questions         |
| `GET`    | `/questions/<id>`           | one question                     |
| `GET`    | `/questions/quiz/<id>`      | all questions of a quiz          |
| `PUT`    | `/questions/<id>`           | update a question                |
| `DELETE` | `/questions/<id>`           | delete a question                |
| `POST`   | `/result/`                  | submit and score a result        |
| `GET`    | `/result/<id>`              | one result                       |
| `GET`    | `/result/quiz/<id>`         | all results of a quiz            |
| `GET`    | `/result/user/<id>`         | all results of a user            |
| `DELETE` | `/result/<id>`              | delete a result                  |

A quiz is created from a body such as:

```json
{"title": "Sets", "description": "Basic set theory", "created_by": "teacher-1", "status": "draft"}
```

A question body has `text`, `type`, `points` and `quiz_id`, and a result body
has `user_id`, `quiz_id`, `status` and `questions`, each question an `id`
with a list of chosen `answers` given by `id`. Creating returns `201` with the
new `id`; a body that cannot be read returns `400`, and any other failure
returns `500`, both as `{"error": "..."}`. Answer correctness is never
included in responses. Reading a quiz re-counts its point total from its
questions and stores it.

## Content service

```console
doit-content
```

The content service needs a `.env` file in the working directory (it stops
with a configuration error otherwise); variables already set in the
environment win over the file. It reads:

| Variable                          | Meaning                          | Default                 |
|-----------------------------------|----------------------------------|-------------------------|
| `SERVER_HTTP_HTTP_PORT`           | port of the HTTP API             | `8080`                  |
| `SERVER_HTTP_GIN_MODE`            | `release`, `debug` or `test`     | `release`               |
| `SERVER_GRPC_PORT`                | must be set and non-empty        |                         |
| `S3_CONN_STR`                     | base URL of the object store     | `http://127.0.0.1:4400` |
| `ZAP_LOGGING_MODE`                | `release`, `debug` or `test`     | `debug`                 |
| `ZAP_LOGGING_DIRECTORY`           | directory of the log files       | `./logs`                |

Further timeout, size and telemetry settings are read into
`doitplatform.content.config.Config` and checked, but not otherwise used.

Routes:

- `PUT /api/v1/file/` stores the request body with its `Content-Type` and
  answers `{"message": "File updated successfully", "key": "file"}`. Every
  upload is stored under the key `file`, replacing the previous one.
- `GET /api/v1/file/<key>` returns the stored bytes with their content type.
- `DELETE /api/v1/file/<key>` removes the object and answers `204`.

Storage failures are answered with `500` and `{"error": "..."}`.

## Using the pieces in code

The use cases take their repositories as constructor arguments, so they can be
driven with any object that offers the same methods, for example in tests:

```python
from doitplatform.quiz.usecases import QuizUsecase
from doitplatform.quiz.models import Quiz

usecase = QuizUsecase(quiz_repo, question_repo)
created = usecase.create_quiz(
    Quiz(title="Sets", description="Basic set theory", created_by="teacher-1", status="draft")
)
```

The MongoDB repositories are `QuizRepository`, `QuestionRepository` and
`ResultRepository` in `doitplatform.quiz.repository`; the object-store
repository is `S3FileRepository` in `doitplatform.content.s3`. Missing or
invalid input raises `InvalidInputError`; storage failures raise
`RepositoryError` or `S3Error`.

The gateway is assembled by hand:

```python
import logging
from doitplatform.gateway.config import load_config
from doitplatform.gateway.files import FileUsecase
from doitplatform.gateway.http_server import API

config = load_config()  # needs HTTP_PORT and GRPC_CONTENT_SERVICE_URL
api = API(config.server.http_server, logging.getLogger("gateway"), FileUsecase(presenter))
api.run()
```

## What the package does not do

- It has no RPC server for either service; `GRPC_PORT` and `SERVER_GRPC_PORT`
  are read but nothing listens on them.
- The gateway has no command of its own and no presenter that reaches the
  content service: `GRPC_CONTENT_SERVICE_URL` is read but not used, and you
  must supply the object passed to `FileUsecase`.
- No metrics or tracing are exported; the telemetry settings are only read.