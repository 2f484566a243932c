#!/usr/bin/env python3
"""
Quickstart for the EarnWallet SDK.
"""
import logging

from earnwallet_sdk import EarnWalletSDK, SDKConfig


def main():
    """
    Demonstrate basic usage of the SDK.

    This example shows how to:
    1. Build a session from EARNWALLET_* environment variables
    2. Create an account (embedded signer plus smart wallet)
    3. Read balances and deposit idle USDC into the selected vault
    """
    logging.basicConfig(level=logging.INFO)

    sdk = EarnWalletSDK(SDKConfig.from_env())
    account = sdk.wallet.create_account()
    wallet = account.smart_wallet

    print(f"Embedded wallet: {account.embedded_wallet_id}")
    print(f"Smart wallet:    {wallet.get_address()}")
    print(f"Protocol:        {sdk.protocol_entry.info.name}")

    balances = wallet.get_balance()
    for balance in balances:
        print(f"{balance.symbol}: {balance.total_formatted_balance}")

    usdc = next((balance for balance in balances if balance.symbol == "USDC"), None)
    if usdc is None or usdc.total_balance == 0:
        print("Fund the smart wallet with USDC, then run again to deposit")
        return

    result = wallet.earn(usdc.total_formatted_balance)
    print(f"Deposited, user operation {result.hash}")
    print(f"Position: {wallet.get_earn_balance()}")


if __name__ == "__main__":
    main()
