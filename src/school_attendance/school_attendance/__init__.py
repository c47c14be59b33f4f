"""School Attendance package.

Organized by feature modules (students, attendance, sync, reports) with a thin
Flask controller layer over service/repository layers. Attendance is recorded
on-device first and drained to the remote store by the sync coordinator.
"""
