"""
Todo Reminder Service package.

Import the application factory from .main (create_app) or the ready-built
module-level app (src.todo_reminder.main:app) for ASGI servers.
"""
