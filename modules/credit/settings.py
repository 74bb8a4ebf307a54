"""Credit ledger configuration."""

# Ledger transaction types.
TYPE_PURCHASE = "purchase"
TYPE_SUBSCRIPTION_RENEWAL = "subscription_renewal"
TYPE_REGISTER_GIFT = "register_gift"
TYPE_ADMIN_GRANT = "admin_grant"
TYPE_REFUND = "refund"
TYPE_USAGE = "usage"
TYPE_EXPIRE = "expire"

# Payment webhook events understood by the fulfilment handler.
EVENT_CREDITS_PURCHASED = "credits.purchased"
EVENT_SUBSCRIPTION_CREATED = "subscription.created"
EVENT_SUBSCRIPTION_RENEWED = "subscription.renewed"

SIGNATURE_HEADER = "X-Webhook-Signature"
SIGNATURE_PREFIX = "sha256="

TRANSACTION_HISTORY_LIMIT = 20
