"""
Reminder subsystem.

Components:
- job_queue.py: durable deferred-job table (SQLite), one job per key
- reminder_scheduler.py: turns a due date into a keyed deferred job
- reminder_worker.py: runs a fired job and posts the notification
- job_runner.py: polling loop that claims and runs due jobs
"""
