"""Tests del clasificador por topic."""

from datetime import datetime, timezone

import pytest

from telemetry_api.core.classification import (
    ClassifierConfig,
    TopicClassifier,
    extract_voltage,
    node_id_from_topic,
)
from telemetry_api.core.domain import BatteryLog, GenericLog, SeismicLog

RECEIVED_AT = datetime(2024, 5, 1, 12, 30, 0, 123000, tzinfo=timezone.utc)


@pytest.fixture
def classifier() -> TopicClassifier:
    return TopicClassifier()


# =============================================================================
# HEARTBEATS
# =============================================================================

class TestHeartbeat:

    @pytest.mark.parametrize("payload", ["Main Node: alive", "MAIN NODE: up", "x main node: 1.2V"])
    def test_heartbeat_is_discarded_in_any_case(self, classifier, payload):
        result = classifier.classify("home/earthquake/node1", payload)

        assert result.is_discard
        assert result.reason == "heartbeat"

    def test_heartbeat_wins_over_generic_topic(self, classifier):
        result = classifier.classify("fsae/telemetry", "main node: ok")

        assert result.is_discard


# =============================================================================
# GENERIC
# =============================================================================

class TestGenericLog:

    def test_generic_topic_produces_generic_log(self, classifier):
        result = classifier.classify("fsae/car/speed", "42", RECEIVED_AT)

        assert result.records == (
            GenericLog(topic="fsae/car/speed", value="42", timestamp="2024-05-01T12:30:00.123Z"),
        )

    def test_generic_voltage_text_is_not_battery(self, classifier):
        result = classifier.classify("fsae/pack", "12.4V,OK")

        assert len(result.records) == 1
        assert isinstance(result.records[0], GenericLog)

    def test_unknown_topic_is_discarded(self, classifier):
        result = classifier.classify("other/topic", "12.4V")

        assert result.is_discard
        assert result.reason == "unrouted topic"


# =============================================================================
# SEISMIC + BATTERY
# =============================================================================

class TestSeismicAndBattery:

    def test_voltage_payload_yields_seismic_and_battery(self, classifier):
        result = classifier.classify("home/earthquake/node7", "12.4V,OK", RECEIVED_AT)

        seismic, battery = result.records
        assert seismic == SeismicLog(node_id="node7", magnitude_or_text="12.4V,OK", timestamp="2024-05-01T12:30:00.123Z")
        assert battery == BatteryLog(
            node_id="node7",
            voltage="12.4",
            raw_message="12.4V,OK",
            timestamp="2024-05-01T12:30:00.123Z",
        )

    def test_confirmed_excludes_battery(self, classifier):
        result = classifier.classify("home/earthquake/node7", "status confirmed 12.4V")

        assert len(result.records) == 1
        assert isinstance(result.records[0], SeismicLog)

    def test_confirmed_with_anchored_voltage_still_excluded(self, classifier):
        result = classifier.classify("home/earthquake/node7", "3.9v,CONFIRMED")

        assert [type(r) for r in result.records] == [SeismicLog]

    @pytest.mark.parametrize("payload", ["ONLINE", "OFFLINE"])
    def test_status_sentinels_are_kept_as_seismic_only(self, classifier, payload):
        result = classifier.classify("home/earthquake/status", payload)

        assert len(result.records) == 1
        assert result.records[0].node_id == "status"
        assert result.records[0].magnitude_or_text == payload

    def test_plain_text_is_seismic_only(self, classifier):
        result = classifier.classify("home/earthquake/node2", "Magnitude 3.1 detected")

        assert [type(r) for r in result.records] == [SeismicLog]

    def test_every_seismic_message_yields_exactly_one_seismic_record(self, classifier):
        for payload in ["12.4V,OK", "hello", "ONLINE", "1.0V", "confirmed"]:
            result = classifier.classify("home/earthquake/n", payload)
            assert sum(isinstance(r, SeismicLog) for r in result.records) == 1

    def test_custom_prefixes(self):
        classifier = TopicClassifier(ClassifierConfig(generic_prefix="car/", seismic_prefix="quake/"))

        assert isinstance(classifier.classify("car/x", "1").records[0], GenericLog)
        assert classifier.classify("quake/n1", "5.0V").records[1].voltage == "5.0"
        assert classifier.classify("fsae/x", "1").is_discard


# =============================================================================
# VOLTAGE PATTERN
# =============================================================================

class TestVoltagePattern:

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ("12.4V,OK", "12.4"),
            ("12.4v", "12.4"),
            ("OK,3.70V", "3.70"),
            ("OK, 3.7V ,temp", "3.7"),
            ("1.1V,2.2V", "1.1"),
            ("temp 21.5,4.1V", "4.1"),
        ],
    )
    def test_anchored_matches(self, payload, expected):
        assert extract_voltage(payload) == expected

    @pytest.mark.parametrize(
        "payload",
        [
            "battery 12.4V",
            "12.4V OK",
            "x12.4V,OK",
            "12V,OK",
            "12.4 V,OK",
            "rev 1.2Vx",
            "",
        ],
    )
    def test_embedded_or_malformed_tokens_do_not_match(self, payload):
        assert extract_voltage(payload) is None


class TestNodeId:

    def test_last_segment(self):
        assert node_id_from_topic("home/earthquake/node9") == "node9"

    def test_topic_without_segments(self):
        assert node_id_from_topic("standalone") == "standalone"

    def test_trailing_slash_yields_empty_segment(self):
        assert node_id_from_topic("home/earthquake/") == ""
