"""Custom signals for the registration app.

Signals:
    registration_confirmed: Sent after a new registration is committed.
        Sender: The ``Registration`` class.
        Kwargs:
            registration: The newly created ``Registration``.
            source: The ``Registration.Source`` value of the creating path.
"""

from django.dispatch import Signal

registration_confirmed = Signal()
