"""
Payments package.

Registers the payments dashboard card and the payment settings page. The
package has no server behaviour of its own in this application.
"""

from app.plugins.registry import PackageDefinition, RegistryEntry, register_package


PAYMENTS_ICON = "fa fa-credit-card"

PAYMENTS_PACKAGE = PackageDefinition(
    name="reaction-payments",
    label="Payments",
    icon=PAYMENTS_ICON,
    auto_enable=True,
    settings={
        "payments": {
            "enabled": True
        }
    },
    registry=[
        RegistryEntry(
            provides=["dashboard"],
            name="payments",
            label="Payments",
            description="Payment Methods",
            icon=PAYMENTS_ICON,
            priority=1,
            container="core",
            workflow="coreDashboardWorkflow",
        ),
        RegistryEntry(
            provides=["settings"],
            name="payment/settings",
            label="Payment Settings",
            icon=PAYMENTS_ICON,
            route="/dashboard/payment/settings",
            template="paymentSettings",
            workflow="coreAdminWorkflow",
        ),
    ],
)

register_package(PAYMENTS_PACKAGE)
