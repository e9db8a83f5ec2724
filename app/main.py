"""
Server entry point for the Expense Tracker API.

Run with:
    uvicorn app.main:app --reload

Configuration comes from the environment and .env (see .env.example).
"""

from expense_tracker.api import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000)
