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
from dataclasses import dataclass
from typing import Optional, Union

from jsconsumer import json_util
from jsconsumer.api import DEFAULT_PREFIX, Field
from jsconsumer.config import ConsumerConfiguration, _finalize, encode_request
from jsconsumer.errors import APIError, DecodeError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreateRequest:
    """
    CreateRequest is a consumer create request ready to be sent.
    """
    subject: str
    config: ConsumerConfiguration
    payload: bytes


def create_subject(
    stream: str,
    durable: Optional[str] = None,
    prefix: str = DEFAULT_PREFIX,
) -> str:
    if durable:
        return f"{prefix}.CONSUMER.DURABLE.CREATE.{stream}.{durable}"
    return f"{prefix}.CONSUMER.CREATE.{stream}"


def prepare_create(
    stream: str,
    config: Optional[ConsumerConfiguration] = None,
    *,
    durable: Optional[str] = None,
    deliver_subject: Optional[str] = None,
    filter_subject: Optional[str] = None,
    max_ack_pending: Optional[int] = None,
    prefix: str = DEFAULT_PREFIX,
) -> CreateRequest:
    """
    prepare_create finalizes a configuration with the values decided when
    subscribing and encodes the request to create the consumer.

    :param stream: name of the stream the consumer is attached to.
    :param config: base configuration, defaults are used when not given.
    :param durable: durable name, overrides the one in config.
    :param deliver_subject: inbox for push consumers.
    :param filter_subject: subject filter, overrides the one in config.
    :param max_ack_pending: overrides the one in config.
    :param prefix: JetStream API prefix, e.g. for a domain.
    """
    if not stream:
        raise ValueError("jsconsumer: stream name is required")
    if config is None:
        config = ConsumerConfiguration()
    config = _finalize(
        config,
        durable=durable,
        deliver_subject=deliver_subject,
        filter_subject=filter_subject,
        max_ack_pending=max_ack_pending,
    )
    subject = create_subject(stream, config.durable, prefix=prefix)
    _logger.debug("prepared consumer create request on %s", subject)
    return CreateRequest(
        subject=subject,
        config=config,
        payload=encode_request(config, stream).encode(),
    )


def parse_create_response(data: Union[str, bytes]) -> ConsumerConfiguration:
    """
    parse_create_response reads the configuration the server applied to
    the consumer.

    :raises APIError: if the server answered with an error.
    :raises DecodeError: if the response cannot be decoded.
    """
    doc = json_util.load_document(data)
    err = doc.get(Field.ERROR)
    if err is not None:
        if not isinstance(err, dict):
            raise DecodeError(
                "expected a JSON object", field=Field.ERROR, value=err
            )
        APIError.from_error(err)
    config = doc.get(Field.CONFIG)
    if not isinstance(config, dict):
        raise DecodeError(
            "expected a JSON object", field=Field.CONFIG, value=config
        )
    return ConsumerConfiguration.from_response(config)
