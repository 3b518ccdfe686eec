"""Class attendance package.

Organized by feature modules (students, subjects, attendance, reports,
marking) with a thin Flask controller layer over service/repository layers.
"""
