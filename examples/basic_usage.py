#!/usr/bin/env python3
"""
Basic usage example for libvault
"""

import logging
import os

from libvault import KVV2, AppRoleAuth, NotFoundError, Vault

logging.basicConfig(level=logging.INFO)


def main():
    # Configure client; host defaults to VAULT_ADDR
    vault = Vault.new(
        auth_adapter=AppRoleAuth(),
        engine=KVV2(),
        transport_options={"timeout": 10, "max_retries": 2},
    )

    # Authenticate with AppRole
    vault = vault.auth(
        role_id=os.environ["VAULT_ROLE_ID"],
        secret_id=os.environ["VAULT_SECRET_ID"],
    )

    # Write a secret, only if it does not exist yet
    written = vault.write("secret/app/database", {"password": "super-secret-password"}, cas=0)
    print(f"Wrote version {written['version']}")

    # Read it back
    print(f"Read keys: {sorted(vault.read('secret/app/database'))}")

    # List secrets
    print(f"Secrets under app/: {vault.list('secret/app/')['keys']}")

    # Soft delete the first version
    vault.delete("secret/app/database", versions=[written["version"]])
    try:
        vault.read("secret/app/database")
    except NotFoundError:
        print("Secret deleted")

    # Tokens are not renewed automatically
    if vault.token_expired():
        vault = vault.auth()


if __name__ == "__main__":
    main()
