"""HR Payroll package.

Organized by feature modules (staff, attendance, salary, statutory, payroll)
with a thin Flask JSON controller layer over service/repository layers.
"""
