"""Vercel serverless entrypoint"""
# Vercel sets VERCEL=1, which puts the app in serverless mode: no startup
# connect, the database connection is made lazily per request.
from chatbot_backend.main import app  # noqa: F401
