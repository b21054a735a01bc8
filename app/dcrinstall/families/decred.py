"""Decred bundle: node, wallet, lightning and politeia tools."""

import logging

from dcrinstall.core.context import PreparedBundle, RunContext
from dcrinstall.core.platform import executable_name
from dcrinstall.core.templating import Override
from dcrinstall.core.wallet import ensure_client_certs, ln_wallet_db_path, wallet_db_path
from dcrinstall.families.base import Family
from dcrinstall.models.component import ComponentDescriptor

logger = logging.getLogger(__name__)

DECRED_COMPONENTS: tuple[ComponentDescriptor, ...] = (
    ComponentDescriptor(
        name="dcrctl",
        config="dcrctl.conf",
        sample_filename="sample-dcrctl.conf",
        supports_version=True,
    ),
    ComponentDescriptor(
        name="dcrd",
        config="dcrd.conf",
        sample_filename="sample-dcrd.conf",
        supports_version=True,
    ),
    ComponentDescriptor(
        name="dcrwallet",
        config="dcrwallet.conf",
        sample_filename="sample-dcrwallet.conf",
        supports_version=True,
    ),
    ComponentDescriptor(name="promptsecret"),
    ComponentDescriptor(
        name="dcrlnd",
        config="dcrlnd.conf",
        sample_filename="sample-dcrlnd.conf",
        supports_version=True,
    ),
    ComponentDescriptor(name="dcrlncli", supports_version=True),
    ComponentDescriptor(
        name="politeiavoter",
        config="politeiavoter.conf",
        sample_filename="sample-politeiavoter.conf",
        supports_version=True,
    ),
    ComponentDescriptor(name="gencerts"),
)

# Components whose configs carry the testnet/simnet switches
_NETWORK_AWARE = frozenset({"dcrctl", "dcrd", "dcrwallet"})


class DecredFamily(Family):
    """The mandatory Decred bundle."""

    name = "decred"
    display_name = "Decred"
    components = DECRED_COMPONENTS

    def config_overrides(self, component: ComponentDescriptor, context: RunContext) -> list[Override]:
        user = context.credentials.username
        password = context.credentials.password

        if component.name == "dcrwallet":
            overrides = [Override("; username=", user), Override("; password=", password)]
        elif component.name == "dcrlnd":
            overrides = [
                Override("; dcrd.rpcuser=", user),
                Override("; dcrd.rpcpass=", password),
            ]
        else:
            overrides = [Override("; rpcuser=", user), Override("; rpcpass=", password)]

        if component.name in _NETWORK_AWARE and context.net != "mainnet":
            overrides.append(Override(f"; {context.net}=", "1"))
        return overrides

    def post_config(self, context: RunContext, bundle: PreparedBundle) -> list[str]:
        notices: list[str] = []
        tuple_ = context.target_tuple

        ensure_client_certs(bundle.source_dir / executable_name("gencerts", tuple_))

        if wallet_db_path(context.net).exists():
            logger.info("Wallet exists, skipping creation")
        elif not context.settings.create_wallet:
            logger.info("Wallet creation disabled")
            notices.append(
                "No Decred wallet was created.\n\n"
                f"To create one run '{context.destination / executable_name('dcrwallet', tuple_)} --create'."
            )
        else:
            dcrwallet = bundle.source_dir / executable_name("dcrwallet", tuple_)
            context.wallet_creator(dcrwallet, context.net)

        if ln_wallet_db_path(context.net).exists():
            logger.info("Lightning wallet exists, skipping creation")
        else:
            # dcrlnd must be running before its wallet can be created
            logger.info("Lightning wallet does not exist")
            dcrlncli = context.destination / executable_name("dcrlncli", tuple_)
            notices.append(
                "The lightning wallet could not be automatically created.\n\n"
                "To create a lightning wallet:\n"
                "* Start dcrlnd\n"
                f"* Run '{dcrlncli} create'"
            )
        return notices
