"""dcrdex bundle: the DEX client, its control tool and web assets."""

from dcrinstall.core.context import PreparedBundle, RunContext
from dcrinstall.core.templating import Override
from dcrinstall.families.base import Family
from dcrinstall.models.component import ComponentDescriptor

DCRDEX_COMPONENTS: tuple[ComponentDescriptor, ...] = (
    ComponentDescriptor(
        name="dexcctl",
        config="dexcctl.conf",
        sample_resource="sample-dexcctl.conf",
        supports_version=True,
    ),
    ComponentDescriptor(
        name="dexc",
        config="dexc.conf",
        sample_resource="sample-dexc.conf",
        supports_version=True,
    ),
    ComponentDescriptor(name="site", directory=True),
)

DCRDEX_NOTICE = (
    "DCRDEX:\n\n"
    "* Start wallets (dcrd/dcrwallet and bitcoind) before starting dexc.\n"
    "* Allow both wallets to synchronize completely.\n\n"
    "Please read the release notes at https://github.com/decred/dcrdex/releases "
    "for IMPORTANT NOTICES."
)


class DcrdexFamily(Family):
    """The optional decentralized exchange client bundle."""

    name = "dcrdex"
    display_name = "dcrdex"
    components = DCRDEX_COMPONENTS

    def config_overrides(self, component: ComponentDescriptor, context: RunContext) -> list[Override]:
        return [
            Override("; rpc=", "1"),
            Override("; rpcuser=", context.credentials.username, required=True),
            Override("; rpcpass=", context.credentials.password, required=True),
        ]

    def post_install_notices(self, context: RunContext, bundle: PreparedBundle) -> list[str]:
        return [DCRDEX_NOTICE]
