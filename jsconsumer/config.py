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

import logging
from dataclasses import dataclass, fields, replace
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Union

from jsconsumer import json_util
from jsconsumer.api import AckPolicy, DeliverPolicy, Field, ReplayPolicy
from jsconsumer.errors import DecodeError, EncodeError
from jsconsumer.json_util import JsonUtil

_logger = logging.getLogger(__name__)

DEFAULT_DELIVER_POLICY = DeliverPolicy.ALL
DEFAULT_ACK_POLICY = AckPolicy.EXPLICIT
DEFAULT_REPLAY_POLICY = ReplayPolicy.INSTANT
DEFAULT_ACK_WAIT = timedelta(seconds=30)
DEFAULT_START_SEQUENCE = 0
DEFAULT_MAX_DELIVER = -1
DEFAULT_RATE_LIMIT = 0
DEFAULT_MAX_ACK_PENDING = 0

_KNOWN_TAGS = frozenset((
    Field.DURABLE_NAME,
    Field.DELIVER_SUBJECT,
    Field.DELIVER_POLICY,
    Field.OPT_START_SEQ,
    Field.OPT_START_TIME,
    Field.ACK_POLICY,
    Field.ACK_WAIT,
    Field.MAX_DELIVER,
    Field.MAX_ACK_PENDING,
    Field.FILTER_SUBJECT,
    Field.REPLAY_POLICY,
    Field.SAMPLE_FREQ,
    Field.RATE_LIMIT_BPS,
))


@dataclass(frozen=True)
class ConsumerConfiguration:
    """Consumer configuration.

    Values are immutable, use a :class:`Builder` or :meth:`evolve` to derive
    a modified copy.

    ::

        cc = ConsumerConfiguration.builder() \\
            .durable("orders-durable") \\
            .ack_wait(timedelta(seconds=10)) \\
            .max_deliver(5) \\
            .build()
        payload = cc.to_json("ORDERS")

    References:
        * `Consumers <https://docs.nats.io/jetstream/concepts/consumers>`_
    """
    durable: Optional[str] = None
    # Push based consumers, pull based when unset.
    deliver_subject: Optional[str] = None
    deliver_policy: DeliverPolicy = DEFAULT_DELIVER_POLICY
    # Only used by DeliverPolicy.BY_START_SEQUENCE.
    start_sequence: int = DEFAULT_START_SEQUENCE
    # Only used by DeliverPolicy.BY_START_TIME.
    start_time: Optional[datetime] = None
    ack_policy: AckPolicy = DEFAULT_ACK_POLICY
    ack_wait: timedelta = DEFAULT_ACK_WAIT
    max_deliver: int = DEFAULT_MAX_DELIVER
    filter_subject: Optional[str] = None
    replay_policy: ReplayPolicy = DEFAULT_REPLAY_POLICY
    sample_frequency: Optional[str] = None
    rate_limit: int = DEFAULT_RATE_LIMIT
    max_ack_pending: int = DEFAULT_MAX_ACK_PENDING

    @staticmethod
    def builder(config: Optional[ConsumerConfiguration] = None) -> Builder:
        return Builder(config)

    @classmethod
    def from_response(cls, resp: Dict[str, Any]) -> ConsumerConfiguration:
        """Read the configuration from the `config` object of a server response.

        Absent fields take their default, unknown fields are ignored.
        """
        unknown = [k for k in resp if k not in _KNOWN_TAGS]
        if unknown:
            _logger.debug("ignoring unknown consumer config fields: %s", unknown)

        return cls(
            durable=json_util.read_string(resp, Field.DURABLE_NAME),
            deliver_subject=json_util.read_string(resp, Field.DELIVER_SUBJECT),
            deliver_policy=json_util.read_policy(
                resp, Field.DELIVER_POLICY, DeliverPolicy,
                DEFAULT_DELIVER_POLICY
            ),
            start_sequence=json_util.read_long(
                resp, Field.OPT_START_SEQ, DEFAULT_START_SEQUENCE
            ),
            start_time=json_util.read_date(resp, Field.OPT_START_TIME),
            ack_policy=json_util.read_policy(
                resp, Field.ACK_POLICY, AckPolicy, DEFAULT_ACK_POLICY
            ),
            ack_wait=json_util.read_duration(
                resp, Field.ACK_WAIT, DEFAULT_ACK_WAIT
            ),
            max_deliver=json_util.read_long(
                resp, Field.MAX_DELIVER, DEFAULT_MAX_DELIVER
            ),
            filter_subject=json_util.read_string(resp, Field.FILTER_SUBJECT),
            replay_policy=json_util.read_policy(
                resp, Field.REPLAY_POLICY, ReplayPolicy,
                DEFAULT_REPLAY_POLICY
            ),
            sample_frequency=json_util.read_string(resp, Field.SAMPLE_FREQ),
            rate_limit=json_util.read_long(
                resp, Field.RATE_LIMIT_BPS, DEFAULT_RATE_LIMIT
            ),
            max_ack_pending=json_util.read_long(
                resp, Field.MAX_ACK_PENDING, DEFAULT_MAX_ACK_PENDING
            ),
        )

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> ConsumerConfiguration:
        return decode_response(data)

    def evolve(self, **params) -> ConsumerConfiguration:
        """Return a copy of the instance with the passed values replaced.
        """
        return replace(self, **params)

    def as_dict(self) -> Dict[str, object]:
        """Return the configuration converted into an API-friendly dict.
        """
        result: Dict[str, object] = {}
        if self.durable is not None:
            result[Field.DURABLE_NAME] = self.durable
        if self.deliver_subject is not None:
            result[Field.DELIVER_SUBJECT] = self.deliver_subject
        result[Field.DELIVER_POLICY] = self.deliver_policy.value
        result[Field.OPT_START_SEQ] = json_util.write_long(
            Field.OPT_START_SEQ, self.start_sequence
        )
        if self.start_time is not None:
            result[Field.OPT_START_TIME] = json_util.to_rfc3339(
                self.start_time
            )
        result[Field.ACK_POLICY] = self.ack_policy.value
        result[Field.ACK_WAIT] = json_util.write_long(
            Field.ACK_WAIT, json_util.to_nanoseconds(self.ack_wait)
        )
        result[Field.MAX_DELIVER] = json_util.write_long(
            Field.MAX_DELIVER, self.max_deliver
        )
        result[Field.MAX_ACK_PENDING] = json_util.write_long(
            Field.MAX_ACK_PENDING, self.max_ack_pending
        )
        if self.filter_subject is not None:
            result[Field.FILTER_SUBJECT] = self.filter_subject
        result[Field.REPLAY_POLICY] = self.replay_policy.value
        if self.sample_frequency is not None:
            result[Field.SAMPLE_FREQ] = self.sample_frequency
        result[Field.RATE_LIMIT_BPS] = json_util.write_long(
            Field.RATE_LIMIT_BPS, self.rate_limit
        )
        return result

    def to_json(self, stream_name: str) -> str:
        return encode_request(self, stream_name)


def encode_request(config: ConsumerConfiguration, stream_name: str) -> str:
    """Encode the request used to create or update a consumer on a stream.

    :raises EncodeError: if a value cannot be carried by the wire format,
        e.g. an integer outside of the 64-bit range.
    """
    req = {
        Field.STREAM_NAME: stream_name,
        Field.CONFIG: config.as_dict(),
    }
    try:
        return JsonUtil.dumps(req)
    except TypeError as e:
        raise EncodeError(str(e)) from e


def decode_response(data: Union[str, bytes]) -> ConsumerConfiguration:
    """Decode the consumer configuration from a server response document.

    :raises DecodeError: if the document is not valid JSON, has no `config`
        object or one of the known fields holds a value of the wrong type.
    """
    doc = json_util.load_document(data)
    config = doc.get(Field.CONFIG)
    if config is None:
        raise DecodeError("response has no config", field=Field.CONFIG)
    if not isinstance(config, dict):
        raise DecodeError(
            "expected a JSON object", field=Field.CONFIG, value=config
        )
    return ConsumerConfiguration.from_response(config)


def _finalize(
    config: ConsumerConfiguration,
    durable: Optional[str] = None,
    deliver_subject: Optional[str] = None,
    filter_subject: Optional[str] = None,
    max_ack_pending: Optional[int] = None,
) -> ConsumerConfiguration:
    """Apply the values decided while creating a consumer.

    Only the given values are replaced, the passed configuration is left
    untouched.
    """
    params: Dict[str, Any] = {}
    if durable is not None:
        params['durable'] = durable
    if deliver_subject is not None:
        params['deliver_subject'] = deliver_subject
    if filter_subject is not None:
        params['filter_subject'] = filter_subject
    if max_ack_pending is not None:
        params['max_ack_pending'] = max_ack_pending
    if not params:
        return config
    return replace(config, **params)


class Builder:
    """Accumulates consumer settings and builds a :class:`ConsumerConfiguration`.

    Every setter returns the builder so calls can be chained. A builder is
    not invalidated by :meth:`build` and can produce more configurations.
    Builders are not safe for concurrent use.
    """

    def __init__(self, config: Optional[ConsumerConfiguration] = None) -> None:
        if config is None:
            config = ConsumerConfiguration()
        self._params: Dict[str, Any] = {
            f.name: getattr(config, f.name)
            for f in fields(ConsumerConfiguration)
        }

    def get_durable(self) -> Optional[str]:
        return self._params['durable']

    def get_deliver_subject(self) -> Optional[str]:
        return self._params['deliver_subject']

    def get_max_ack_pending(self) -> int:
        return self._params['max_ack_pending']

    def durable(self, durable: Optional[str]) -> Builder:
        self._params['durable'] = durable
        return self

    def deliver_subject(self, subject: Optional[str]) -> Builder:
        self._params['deliver_subject'] = subject
        return self

    def deliver_policy(self, policy: Union[DeliverPolicy, str]) -> Builder:
        self._params['deliver_policy'] = DeliverPolicy(policy)
        return self

    def start_sequence(self, sequence: int) -> Builder:
        self._params['start_sequence'] = sequence
        return self

    def start_time(self, start_time: Optional[datetime]) -> Builder:
        self._params['start_time'] = start_time
        return self

    def ack_policy(self, policy: Union[AckPolicy, str]) -> Builder:
        self._params['ack_policy'] = AckPolicy(policy)
        return self

    def ack_wait(self, timeout: Union[timedelta, float]) -> Builder:
        """Sets how long the server waits for an ack before redelivering.

        :param timeout: a timedelta or a number of seconds.
        """
        if not isinstance(timeout, timedelta):
            timeout = timedelta(seconds=timeout)
        self._params['ack_wait'] = timeout
        return self

    def max_deliver(self, max_deliver: int) -> Builder:
        self._params['max_deliver'] = max_deliver
        return self

    def filter_subject(self, subject: Optional[str]) -> Builder:
        self._params['filter_subject'] = subject
        return self

    def replay_policy(self, policy: Union[ReplayPolicy, str]) -> Builder:
        self._params['replay_policy'] = ReplayPolicy(policy)
        return self

    def sample_frequency(self, frequency: Optional[str]) -> Builder:
        self._params['sample_frequency'] = frequency
        return self

    def rate_limit(self, bps: int) -> Builder:
        self._params['rate_limit'] = bps
        return self

    def max_ack_pending(self, max_ack_pending: int) -> Builder:
        self._params['max_ack_pending'] = max_ack_pending
        return self

    def build(self) -> ConsumerConfiguration:
        return ConsumerConfiguration(**self._params)
