from devnet_sdk.rpc_provider import RpcProvider
from devnet_sdk.utils import add_sync_methods


@add_sync_methods
class Cheats:
    """
    Test-only cheats, e.g. account impersonation.
    see https://0xspaceshard.github.io/starknet-devnet/docs/account-impersonation
    """

    def __init__(self, rpc_provider: RpcProvider):
        self.rpc_provider = rpc_provider

    async def impersonate_account(self, address: str) -> None:
        """
        Impersonate an account which is not present in the local state.
        Deactivate using `stop_impersonate_account`.

        :param address: Address of the account to impersonate
        """
        await self.rpc_provider.send_request(
            "devnet_impersonateAccount", {"account_address": address}
        )

    async def stop_impersonate_account(self, address: str) -> None:
        """
        :param address: Address of the account to stop impersonating
        """
        await self.rpc_provider.send_request(
            "devnet_stopImpersonateAccount", {"account_address": address}
        )

    async def auto_impersonate(self) -> None:
        """
        Impersonate every account that does not exist in the local state.
        Deactivate using `stop_auto_impersonate`.
        """
        await self.rpc_provider.send_request("devnet_autoImpersonate")

    async def stop_auto_impersonate(self) -> None:
        await self.rpc_provider.send_request("devnet_stopAutoImpersonate")
