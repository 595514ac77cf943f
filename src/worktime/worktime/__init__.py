"""Worktime tracker agent.

This package is organized by feature modules (attendance, idle, sync, ...)
with a thin Flask controller layer and service/repository layers. The
clinic server is reached over REST; writes go through the sync dispatcher
so they survive offline periods.
"""
