import unittest

import pytest
from jsconsumer.api import AckPolicy, DeliverPolicy, Field, ReplayPolicy


class PolicyTest(unittest.TestCase):

    def test_wire_strings(self):
        assert [p.value for p in DeliverPolicy] == [
            "all",
            "last",
            "new",
            "by_start_sequence",
            "by_start_time",
        ]
        assert [p.value for p in AckPolicy] == ["none", "all", "explicit"]
        assert [p.value for p in ReplayPolicy] == ["instant", "original"]

    def test_from_wire_inverts_value(self):
        for policy in (DeliverPolicy, AckPolicy, ReplayPolicy):
            for member in policy:
                assert policy.from_wire(member.value) is member

    def test_from_wire_unknown(self):
        assert DeliverPolicy.from_wire("last_per_subject") is None
        assert AckPolicy.from_wire("Explicit") is None
        assert ReplayPolicy.from_wire("") is None

    def test_policies_do_not_share_members(self):
        assert AckPolicy.from_wire("all") is AckPolicy.ALL
        assert DeliverPolicy.from_wire("all") is DeliverPolicy.ALL
        assert AckPolicy.ALL is not DeliverPolicy.ALL

    def test_str_is_wire_string(self):
        assert str(DeliverPolicy.BY_START_TIME) == "by_start_time"
        assert f"{ReplayPolicy.ORIGINAL}" == "original"

    def test_lookup_by_value(self):
        assert DeliverPolicy("new") is DeliverPolicy.NEW
        with pytest.raises(ValueError):
            DeliverPolicy("newest")


class FieldTest(unittest.TestCase):

    def test_tags(self):
        assert Field.DURABLE_NAME == "durable_name"
        assert Field.OPT_START_SEQ == "opt_start_seq"
        assert Field.OPT_START_TIME == "opt_start_time"
        assert Field.SAMPLE_FREQ == "sample_freq"
        assert Field.RATE_LIMIT_BPS == "rate_limit_bps"
        assert Field.MAX_ACK_PENDING == "max_ack_pending"
