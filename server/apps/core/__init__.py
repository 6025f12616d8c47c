"""HTTP plumbing shared by the API apps: JSON errors and middleware."""
