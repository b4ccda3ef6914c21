"""
Constants and builders shared by the ledger tests.
"""

from datetime import datetime, timedelta, timezone

OWNER = "user_2abc"
OTHER_OWNER = "user_9xyz"


class FakeClock:
    """Advances one second per call so entries have distinct, ordered timestamps."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now

    def set(self, moment):
        self.now = moment


def account_data(name="Everyday Checking", balance="0.00"):
    return {
        "display_name": name,
        "institution_name": "First National",
        "external_account_number": "000123456789",
        "routing_code": "021000021",
        "initial_balance": balance,
    }
