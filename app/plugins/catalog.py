"""
Catalog package.

Owns the publish/products method and inventory flag refreshes. It has no
admin panels.
"""

from app.plugins.registry import PackageDefinition, register_package


CATALOG_PACKAGE = PackageDefinition(
    name="reaction-catalog",
    label="Catalog",
    icon="fa fa-book",
    auto_enable=True,
)

register_package(CATALOG_PACKAGE)
