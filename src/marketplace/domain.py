"""Marketplace bounded context — multi-store orders and their fulfillment.

Owns the Order aggregate (cart assembly across independently operated stores,
per-store shipping, payment and delivery) and the commands that orchestrate it
against the inventory and shipping collaborators.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging

configure_logging()

marketplace = Domain(name="marketplace")
