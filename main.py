"""
keyrpc usage examples

Run with KEYRPC_CLIENT_ID set (or in a .env file). Calls that need a
signed-in user only succeed after a refresh token has been stored by an
earlier sign-in.
"""

import asyncio
import logging

from keyrpc import (
    KeyRPC,
    KeyRPCError,
    NetworkConfig,
    NotSignedInError,
    ProviderOptions,
    load_settings,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


async def public_calls_example(sdk: KeyRPC):
    """Example 1: Unauthenticated calls on the default network."""
    print("\n=== Public Calls Example ===")

    provider = sdk.get_provider()
    print(f"Network: {provider.network.name} (chain {provider.network.chain_id})")
    print(f"Chain id: {await provider.request('eth_chainId')}")
    print(f"Latest block: {await provider.request('eth_blockNumber')}")


async def custom_network_example(sdk: KeyRPC):
    """Example 2: A custom endpoint with extra headers."""
    print("\n=== Custom Network Example ===")

    provider = sdk.get_provider(ProviderOptions(
        network=NetworkConfig(rpc_url="http://localhost:8545", chain_id=1337),
        polling_interval=10.0,
        additional_headers={"X-Feature": "enabled"},
    ))
    print(f"Headers: {provider.rpc_headers}")
    try:
        print(f"Latest block: {await provider.request('eth_blockNumber')}")
    except KeyRPCError as e:
        print(f"Local node unavailable: {e}")


async def session_example(sdk: KeyRPC):
    """Example 3: Silent reconnect and account access."""
    print("\n=== Session Example ===")

    sdk.add_sign_out_handler(lambda: print("Signed out"))

    try:
        user = await sdk.connect()
    except NotSignedInError:
        print("No stored session; sign in first")
        return

    print(f"User: {user.id}")
    provider = sdk.get_provider("sepolia")
    print(f"Accounts: {await provider.request('eth_accounts')}")

    await sdk.sign_out()
    print(f"Status: {(await sdk.get_auth_status()).value}")


async def main():
    """Run all examples."""
    examples = [
        public_calls_example,
        custom_network_example,
        session_example,
    ]

    async with KeyRPC.from_settings(load_settings()) as sdk:
        for example in examples:
            try:
                await example(sdk)
            except Exception as e:
                print(f"Error in {example.__name__}: {e}")


if __name__ == "__main__":
    # Run examples
    asyncio.run(main())
