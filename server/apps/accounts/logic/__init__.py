"""Business logic for accounts: token lifecycle and identity checks."""
