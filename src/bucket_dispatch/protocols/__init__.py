# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol definitions for the dispatcher's external collaborators."""

from .encoder import BodyEncoderProtocol
from .notification import NotificationSinkProtocol
from .transport import TransportProtocol

__all__ = [
    "BodyEncoderProtocol",
    "NotificationSinkProtocol",
    "TransportProtocol",
]
