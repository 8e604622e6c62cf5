"""Attendance & leave policy engine"""
