from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class BillingError(DomainError):
    """A billing action could not be completed."""


class PlanNotFoundError(BillingError):
    """Plan does not exist or is not configured for the provider."""


class SubscriptionNotFoundError(BillingError):
    """Workspace has no subscription."""


class SubscriptionInactiveError(BillingError):
    """Workspace subscription is expired or cancelled."""


class PlanLimitError(BillingError):
    """Plan limit reached."""


class WorkspaceNotFoundError(DomainError):
    """Workspace does not exist."""


class WebhookConfigurationError(DomainError):
    """Webhook shared secret is missing."""


class WebhookSignatureError(DomainError):
    """Webhook signature did not verify."""


class ProviderRequestError(DomainError):
    """Payment provider API call failed."""
