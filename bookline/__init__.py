"""Bookline - scheduling API: slots, bookings, workflows, routing forms and apps"""
