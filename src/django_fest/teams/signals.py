"""Custom signals for the teams app.

Signals:
    team_completed: Sent once when a pending team transitions to completed
        and its member registrations have been written.
        Sender: The ``TeamRegistration`` class.
        Kwargs:
            team: The completed ``TeamRegistration``.
            registrations: List of ``Registration`` rows created by this
                completion (members registered earlier are not included).
"""

from django.dispatch import Signal

team_completed = Signal()
