"""Tests for NotificationComposer."""

import json
from datetime import UTC, datetime

import pytest

from wildspine.core.exceptions import ValidationError
from wildspine.models import NotificationMessage, Sighting
from wildspine.notifier.composer import DEFAULT_SUBJECT, NotificationComposer


def sighting(sighting_id, lat, long, reporter, animal_id=7):
    return Sighting(
        id=sighting_id,
        animal_id=animal_id,
        timestamp=datetime(2024, 1, sighting_id, tzinfo=UTC),
        lat=lat,
        long=long,
        reporter_email=reporter,
    )


class TestCompose:
    """Tests for building batches."""

    def test_one_notification_per_sighting(self):
        """Every reporter of every sighting is notified, in order."""
        history = [
            sighting(3, 13.35, 56.79, "c@x.org"),
            sighting(2, 12.34, 56.78, "b@x.org"),
            sighting(1, 12.34, 56.78, "b@x.org"),
        ]

        records = json.loads(NotificationComposer().compose(history))

        assert [r["recipient"] for r in records] == ["c@x.org", "b@x.org", "b@x.org"]
        assert all(r["subject"] == DEFAULT_SUBJECT for r in records)

    def test_body_format(self):
        """Body names the animal and the sighting coordinates."""
        [record] = json.loads(NotificationComposer().compose([sighting(1, 12.34, 56.78, "a@x.org")]))

        assert record == {
            "subject": "Wildlife Sighting",
            "body": "Animal_7 is found at {Lat: 12.34,Long: 56.78}",
            "recipient": "a@x.org",
        }

    def test_negative_coordinates(self):
        [n] = NotificationComposer().notifications([sighting(1, -33.86, -70.5, "a@x.org")])
        assert n.body == "Animal_7 is found at {Lat: -33.86,Long: -70.5}"

    def test_empty_history(self):
        """No sightings gives an empty array."""
        assert NotificationComposer().compose([]) == b"[]"

    def test_custom_subject_and_template(self):
        composer = NotificationComposer(subject="Alert", body_template="#{animal_id} @ {lat},{long}")
        [n] = composer.notifications([sighting(1, 1.5, 2.5, "a@x.org")])
        assert (n.subject, n.body) == ("Alert", "#7 @ 1.5,2.5")


class TestDecode:
    """Tests for parsing batches."""

    def test_decode_compose_output(self):
        history = [sighting(1, 12.34, 56.78, "a@x.org")]
        [n] = NotificationComposer.decode(NotificationComposer().compose(history))
        assert isinstance(n, NotificationMessage)
        assert n.recipient == "a@x.org"

    @pytest.mark.parametrize(
        "body",
        [b"not json", b'{"subject": "x"}', b'[{"subject": "x"}]', b""],
    )
    def test_malformed_batches_raise(self, body):
        with pytest.raises(ValidationError, match="Malformed"):
            NotificationComposer.decode(body)
