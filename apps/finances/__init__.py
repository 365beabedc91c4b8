"""Finances app package.

This app contains the payment model, the Paystack gateway client and
the services that compute fee splits, open hosted checkouts and apply
gateway verifications. Webhooks and redirect callbacks are handled
here as well.
"""
