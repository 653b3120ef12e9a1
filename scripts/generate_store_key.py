#!/usr/bin/env python3
"""Generate a Fernet encryption key for SESSIONGUARD_STORE_KEY."""

from cryptography.fernet import Fernet

if __name__ == "__main__":
    key = Fernet.generate_key().decode()
    print("Add this to your environment to encrypt the token store:\n")
    print(f"SESSIONGUARD_STORE_KEY={key}")
