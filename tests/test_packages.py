"""
==============================================================================
Package Registry Tests
==============================================================================

Tests for package registration and the bundled package definitions.

==============================================================================
"""

import pytest

from app.plugins import (
    PackageDefinition,
    PackageRegistry,
    RegistryEntry,
    get_package,
    list_packages,
)


class TestPackageRegistry:
    """Tests for PackageRegistry."""

    def test_register_and_get(self):
        registry = PackageRegistry()
        package = PackageDefinition(name="reaction-test", label="Test")

        registry.register(package)

        assert registry.get("reaction-test") is package
        assert "reaction-test" in registry
        assert len(registry) == 1

    def test_duplicate_name_rejected(self):
        registry = PackageRegistry()
        registry.register(PackageDefinition(name="reaction-test", label="Test"))

        with pytest.raises(ValueError):
            registry.register(PackageDefinition(name="reaction-test", label="Other"))

    def test_list_filtered_by_provides(self):
        registry = PackageRegistry()
        registry.register(PackageDefinition(
            name="with-settings",
            label="With settings",
            registry=[
                RegistryEntry(name="card", provides=["dashboard"]),
                RegistryEntry(name="page", provides=["settings"]),
            ],
        ))
        registry.register(PackageDefinition(name="plain", label="Plain"))

        [package] = registry.list(provides="settings")

        assert package.name == "with-settings"
        assert [entry.name for entry in package.registry] == ["page"]
        assert len(registry.get("with-settings").registry) == 2


class TestBundledPackages:
    """Tests for the packages registered on import."""

    def test_payments_package(self):
        payments = get_package("reaction-payments")

        assert payments.label == "Payments"
        assert payments.icon == "fa fa-credit-card"
        assert payments.auto_enable is True
        assert payments.settings == {"payments": {"enabled": True}}

    def test_payments_dashboard_entry(self):
        [dashboard] = get_package("reaction-payments").entries("dashboard")

        assert dashboard.name == "payments"
        assert dashboard.label == "Payments"
        assert dashboard.description == "Payment Methods"
        assert dashboard.priority == 1
        assert dashboard.container == "core"
        assert dashboard.workflow == "coreDashboardWorkflow"

    def test_payments_settings_entry(self):
        [settings] = get_package("reaction-payments").entries("settings")

        assert settings.name == "payment/settings"
        assert settings.label == "Payment Settings"
        assert settings.route == "/dashboard/payment/settings"
        assert settings.template == "paymentSettings"
        assert settings.workflow == "coreAdminWorkflow"

    def test_catalog_package(self):
        catalog = get_package("reaction-catalog")

        assert catalog is not None
        assert catalog.registry == []

    def test_list_packages(self):
        names = [package.name for package in list_packages()]

        assert "reaction-payments" in names
        assert "reaction-catalog" in names

    def test_serialized_with_camel_case_flag(self):
        document = get_package("reaction-payments").model_dump(by_alias=True)

        assert document["autoEnable"] is True
