"""Workflow reminders and the SMS credit ledger"""
