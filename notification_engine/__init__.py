"""Notification rule-and-delivery engine package.

Business services hand events to
:func:`notification_engine.application.use_cases.notifications.trigger_notification`;
everything else in the package supports that call or the read path around it.
"""
