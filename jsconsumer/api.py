# Copyright 2021 The NATS Authors
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

from __future__ import annotations

from enum import Enum
from typing import Optional, Type, TypeVar

DEFAULT_PREFIX = "$JS.API"


class Field:
    """JSON tags of the JetStream consumer API.

    Both the request encoder and the response decoder read the tags from here.
    """

    STREAM_NAME = "stream_name"
    CONFIG = "config"
    ERROR = "error"
    DURABLE_NAME = "durable_name"
    DELIVER_SUBJECT = "deliver_subject"
    DELIVER_POLICY = "deliver_policy"
    OPT_START_SEQ = "opt_start_seq"
    OPT_START_TIME = "opt_start_time"
    ACK_POLICY = "ack_policy"
    ACK_WAIT = "ack_wait"
    MAX_DELIVER = "max_deliver"
    MAX_ACK_PENDING = "max_ack_pending"
    FILTER_SUBJECT = "filter_subject"
    REPLAY_POLICY = "replay_policy"
    SAMPLE_FREQ = "sample_freq"
    RATE_LIMIT_BPS = "rate_limit_bps"


_P = TypeVar("_P", bound="_Policy")


class _Policy(str, Enum):

    @classmethod
    def from_wire(cls: Type[_P], value: str) -> Optional[_P]:
        """Return the member for a wire string, or None when it is unknown.
        """
        for member in cls:
            if member.value == value:
                return member
        return None

    def __str__(self) -> str:
        return self.value


class DeliverPolicy(_Policy):
    """When a consumer is first created, it can specify where in the stream it wants to start receiving messages.

    This is the DeliverPolicy, and this enumeration defines allowed values.

    References:
        * `Consumers, DeliverPolicy/OptStartSeq/OptStartTime <https://docs.nats.io/jetstream/concepts/consumers#deliverpolicy-optstartseq-optstarttime>`_
    """  # noqa: E501

    ALL = "all"
    LAST = "last"
    NEW = "new"
    BY_START_SEQUENCE = "by_start_sequence"
    BY_START_TIME = "by_start_time"


class AckPolicy(_Policy):
    """Policies defining how messages should be acknowledged.

    If an ack is required but is not received within the AckWait window, the message will be redelivered.

    References:
        * `Consumers, AckPolicy <https://docs.nats.io/jetstream/concepts/consumers#ackpolicy>`_
    """

    NONE = "none"
    ALL = "all"
    EXPLICIT = "explicit"


class ReplayPolicy(_Policy):
    """The replay policy applies when the DeliverPolicy is one of:
        * all
        * by_start_sequence
        * by_start_time
    since those deliver policies begin reading the stream at a position other than the end.

    References:
        * `Consumers, ReplayPolicy <https://docs.nats.io/jetstream/concepts/consumers#replaypolicy>`_
    """

    INSTANT = "instant"
    ORIGINAL = "original"
