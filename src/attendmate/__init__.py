"""AttendMate package.

Organized by feature modules (subjects, attendance, timetable, projection)
with a thin Flask controller layer over service/repository layers.
"""
