"""
Unit tests for the typed user settings record.
"""

from datetime import UTC, datetime

from subtrack.domain.entities.user import User, UserSettings


class TestUserSettingsSerialization:
    """Round trips between the stored JSON mapping and the typed record."""

    def test_known_keys_map_to_fields(self):
        settings = UserSettings.from_dict(
            {"darkMode": True, "appTheme": "neon", "language": "en", "currency": "EUR"}
        )

        assert settings.dark_mode is True
        assert settings.app_theme == "neon"
        assert settings.language == "en"
        assert settings.currency == "EUR"
        assert settings.extra == {}

    def test_unknown_keys_are_preserved(self):
        data = {"darkMode": False, "fontScale": 1.25, "widgets": ["summary"]}

        settings = UserSettings.from_dict(data)

        assert settings.extra == {"fontScale": 1.25, "widgets": ["summary"]}
        assert settings.to_dict() == data

    def test_empty_or_missing_mapping(self):
        assert UserSettings.from_dict(None) == UserSettings()
        assert UserSettings.from_dict({}).to_dict() == {}

    def test_marker_round_trip(self):
        data = {"darkMode": True, "migrated": True, "migratedAt": "2024-05-01T00:00:00+00:00"}

        settings = UserSettings.from_dict(data)

        assert settings.migrated is True
        assert settings.migrated_at == "2024-05-01T00:00:00+00:00"
        assert settings.to_dict() == data

    def test_non_boolean_marker_is_not_migrated(self):
        settings = UserSettings.from_dict({"migrated": "yes"})

        assert settings.migrated is False
        assert "migrated" not in settings.to_dict()


class TestUserSettingsOperations:
    """Merge and marker operations."""

    def test_merge_prefers_fields_set_in_other(self):
        current = UserSettings(dark_mode=True, language="es", extra={"a": 1})
        incoming = UserSettings(language="en", currency="EUR", extra={"b": 2})

        merged = current.merged_with(incoming)

        assert merged.dark_mode is True
        assert merged.language == "en"
        assert merged.currency == "EUR"
        assert merged.extra == {"a": 1, "b": 2}

    def test_merge_never_touches_marker(self):
        current = UserSettings(migrated=True, migrated_at="2024-01-01T00:00:00+00:00")

        merged = current.merged_with(UserSettings(dark_mode=False))

        assert merged.migrated is True
        assert merged.migrated_at == "2024-01-01T00:00:00+00:00"

    def test_set_marker_keeps_other_settings(self):
        at = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)

        settings = UserSettings(dark_mode=True).with_migration_marker(at)

        assert settings.to_dict() == {
            "darkMode": True,
            "migrated": True,
            "migratedAt": at.isoformat(),
        }

    def test_clear_marker_keeps_other_settings(self):
        settings = UserSettings.from_dict(
            {"darkMode": True, "custom": "x", "migrated": True, "migratedAt": "2024-01-01"}
        )

        cleared = settings.without_migration_marker()

        assert cleared.to_dict() == {"darkMode": True, "custom": "x"}

    def test_clear_marker_on_empty_settings(self):
        assert UserSettings().without_migration_marker().to_dict() == {}


class TestUserSettingsValidation:
    """Dropping known fields of the wrong shape."""

    def test_well_formed_settings_pass(self):
        settings, errors = UserSettings.from_dict(
            {"darkMode": False, "language": " en ", "currency": "eur", "privacy": {"a": 1}}
        ).validated()

        assert errors == []
        assert settings.language == "en"
        assert settings.currency == "EUR"
        assert settings.privacy == {"a": 1}

    def test_bad_values_are_dropped(self):
        settings, errors = UserSettings.from_dict(
            {
                "darkMode": "yes",
                "language": ["en"],
                "currency": "€€€",
                "notifications": "on",
                "fontScale": 2,
            }
        ).validated()

        assert settings.dark_mode is None
        assert settings.language is None
        assert settings.currency is None
        assert settings.notifications is None
        assert settings.extra == {"fontScale": 2}
        assert len(errors) == 4

    def test_language_length_bounds(self):
        assert UserSettings(language="e").validated()[0].language is None
        assert UserSettings(language="x" * 11).validated()[0].language is None
        assert UserSettings(language="pt-BR").validated()[0].language == "pt-BR"


class TestUserProfile:
    """Public projection of a user."""

    def test_profile_has_no_password_hash(self):
        user = User(email="a@example.com", password_hash="$2b$04$secret", name="A")

        profile = user.to_profile().to_dict()

        assert "passwordHash" not in profile
        assert "password_hash" not in profile
        assert "$2b$04$secret" not in str(profile)
        assert profile["email"] == "a@example.com"
        assert profile["isVerified"] is True
        assert profile["language"] == "es"
        assert profile["currency"] == "USD"
