"""
schedplanner – course timetable generator.

Generates conflict-free weekly schedules from a course catalog, honouring
the exact number of lectures/practicals/seminars each course requires and
the user's preferences (e.g. a free day).
"""
