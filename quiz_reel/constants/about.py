"""Static metadata describing QuizReel."""

APP_NAME = "QuizReel"
APP_VERSION = "0.1"
