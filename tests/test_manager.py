import json
import unittest

import pytest
from jsconsumer import AckPolicy, Builder, ConsumerConfiguration
from jsconsumer.errors import (
    APIError,
    BadRequestError,
    DecodeError,
    NotFoundError,
    ServerError,
    ServiceUnavailableError,
)
from jsconsumer.manager import (
    CreateRequest,
    create_subject,
    parse_create_response,
    prepare_create,
)


class CreateSubjectTest(unittest.TestCase):

    def test_durable(self):
        assert create_subject("ORDERS", "dur") \
            == "$JS.API.CONSUMER.DURABLE.CREATE.ORDERS.dur"

    def test_ephemeral(self):
        assert create_subject("ORDERS") == "$JS.API.CONSUMER.CREATE.ORDERS"
        assert create_subject("ORDERS", "") == "$JS.API.CONSUMER.CREATE.ORDERS"

    def test_prefix(self):
        assert create_subject("ORDERS", prefix="$JS.hub.API") \
            == "$JS.hub.API.CONSUMER.CREATE.ORDERS"


class PrepareCreateTest(unittest.TestCase):

    def test_defaults(self):
        req = prepare_create("ORDERS")
        assert isinstance(req, CreateRequest)
        assert req.subject == "$JS.API.CONSUMER.CREATE.ORDERS"
        assert req.config == ConsumerConfiguration()
        payload = json.loads(req.payload)
        assert payload["stream_name"] == "ORDERS"
        assert payload["config"]["ack_policy"] == "explicit"

    def test_subscribe_values_applied(self):
        cc = Builder().ack_policy(AckPolicy.ALL).filter_subject("a").build()
        req = prepare_create(
            "ORDERS",
            cc,
            durable="dur",
            deliver_subject="_INBOX.abc",
            filter_subject="orders.*",
            max_ack_pending=100,
        )
        assert req.subject == "$JS.API.CONSUMER.DURABLE.CREATE.ORDERS.dur"
        assert req.config.durable == "dur"
        assert req.config.deliver_subject == "_INBOX.abc"
        assert req.config.filter_subject == "orders.*"
        assert req.config.max_ack_pending == 100
        assert req.config.ack_policy is AckPolicy.ALL

        config = json.loads(req.payload)["config"]
        assert config["durable_name"] == "dur"
        assert config["deliver_subject"] == "_INBOX.abc"
        assert config["filter_subject"] == "orders.*"
        assert config["max_ack_pending"] == 100

        # Caller's configuration is left as it was.
        assert cc.durable is None
        assert cc.filter_subject == "a"

    def test_durable_from_config(self):
        cc = Builder().durable("dur").build()
        req = prepare_create("ORDERS", cc, prefix="$JS.hub.API")
        assert req.subject == "$JS.hub.API.CONSUMER.DURABLE.CREATE.ORDERS.dur"
        assert req.config is cc

    def test_stream_required(self):
        with pytest.raises(ValueError):
            prepare_create("")


class ParseCreateResponseTest(unittest.TestCase):

    def test_config(self):
        cc = parse_create_response(
            b'{"stream_name":"ORDERS","name":"dur",'
            b'"config":{"durable_name":"dur","ack_policy":"none"}}'
        )
        assert cc == Builder().durable("dur").ack_policy("none").build()

    def test_api_errors(self):
        cases = [
            (400, BadRequestError),
            (404, NotFoundError),
            (500, ServerError),
            (503, ServiceUnavailableError),
        ]
        for code, err_type in cases:
            resp = json.dumps({
                "error": {
                    "code": code,
                    "err_code": 10014,
                    "description": "consumer not found",
                }
            })
            with pytest.raises(err_type) as err:
                parse_create_response(resp)
            assert err.value.code == code
            assert err.value.err_code == 10014
            assert err.value.description == "consumer not found"

    def test_other_api_error(self):
        with pytest.raises(APIError) as err:
            parse_create_response(
                '{"error": {"code": 409, "description": "conflict"}}'
            )
        assert type(err.value) is APIError
        assert str(err.value) == (
            "jsconsumer: APIError: code=409 err_code=None description='conflict'"
        )

    def test_malformed(self):
        for doc in ('{"error": "boom"}', '{"name": "dur"}', "nope"):
            with pytest.raises(DecodeError):
                parse_create_response(doc)
