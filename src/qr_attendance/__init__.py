"""QR attendance package.

Organized by feature modules (students, attendance, scanning) with a thin Flask
controller layer over service and repository layers. The scan engine itself
(time windows, resolution, confirmation, recording) has no Flask dependency.
"""
