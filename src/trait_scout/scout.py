"""
Main Trait Scout pipeline class
"""

from typing import Any, List, Optional
from loguru import logger

from .config import Config, config
from .contracts import build_web3, load_collection_contract, load_registry_contract
from .enumerator import BoundedIdEnumerator
from .exceptions import NotConnectedError, RegistrationError, ScanError
from .metadata import MetadataResolver
from .models import ClaimStats, CollectionReport, ScanResult, ScanStatus, TraitSummary
from .registry import RegistryMerger
from .scanner import CollectionScanner
from .session import WalletSession
from .storage import get_storage_adapter
from .traits import aggregate
from .utils import addresses_equal, parse_chain_id


class TraitScout:
    """
    Runs scan -> registry merge -> trait aggregation for the connected wallet

    The current report is replaced by a single assignment at the end of a
    successful refresh. Every refresh and every session change takes a new
    generation; a refresh that finishes after a newer generation started is
    discarded instead of overwriting newer state.
    """

    def __init__(
        self,
        config_instance: Optional[Config] = None,
        session: Optional[WalletSession] = None,
        w3: Optional[Any] = None,
        collection_contract: Optional[Any] = None,
        registry_contract: Optional[Any] = None,
        resolver: Optional[MetadataResolver] = None,
    ):
        self.config = config_instance or config
        self.collection = self.config.get_collection_config()
        self.session = session

        self.w3 = w3 or build_web3(self.config)
        self.collection_contract = collection_contract or load_collection_contract(
            self.w3, self.collection.collection_address
        )
        if registry_contract is None:
            registry_contract = load_registry_contract(self.w3, self.collection.registry_address)
        self.registry_contract = registry_contract

        self.storage = get_storage_adapter(self.config)
        self.resolver = resolver or MetadataResolver(self.collection, self.config, storage=self.storage)
        self.scanner = CollectionScanner(
            self.resolver,
            enumerator=BoundedIdEnumerator(self.config.max_workers),
            strategy=self.collection.enumeration,
        )
        self.merger = RegistryMerger(receipt_timeout=max(self.config.timeout, 120))

        self._report: Optional[CollectionReport] = None
        self._generation = 0
        self._in_flight = 0
        self.last_error: Optional[Exception] = None

    async def close(self):
        await self.resolver.close()

    async def __aenter__(self) -> "TraitScout":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    # State

    @property
    def report(self) -> Optional[CollectionReport]:
        return self._report

    @property
    def result(self) -> Optional[ScanResult]:
        return self._report.result if self._report is not None else None

    @property
    def claims(self) -> Optional[ClaimStats]:
        return self._report.claims if self._report is not None else None

    @property
    def traits(self) -> Optional[TraitSummary]:
        return self._report.traits if self._report is not None else None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    # Session lifecycle

    async def connect_address(self, address: str, private_key: Optional[str] = None) -> WalletSession:
        """Open a session for address on whatever chain the RPC endpoint serves"""
        try:
            chain_id = await self.w3.eth.chain_id
        except Exception as e:
            logger.error(f"Could not read chain ID from RPC endpoint: {e}")
            raise NotConnectedError(f"Could not reach RPC endpoint {self.config.rpc_url}: {e}") from e
        self.connect(WalletSession.connect(address, chain_id=chain_id, private_key=private_key))
        return self.session

    def connect(self, session: WalletSession):
        self.session = session
        self._next_generation()
        logger.info(f"Wallet connected: {session.address} (chain {session.chain_id})")

    def disconnect(self):
        """Tear down the session and forget everything discovered for it"""
        self.session = None
        self._report = None
        self._next_generation()
        logger.info("Wallet disconnected")

    def on_accounts_changed(self, accounts: List[str]):
        """Handle the wallet's accountsChanged event"""
        if not accounts:
            self.disconnect()
            return
        current = self.session
        if current is not None and addresses_equal(current.address, accounts[0]):
            return
        chain_id = current.chain_id if current is not None else None
        self.session = WalletSession.connect(accounts[0], chain_id=chain_id)
        self._report = None
        self._next_generation()
        logger.info(f"Account changed to {self.session.address}")

    def on_chain_changed(self, chain_id: Any):
        """Handle the wallet's chainChanged event"""
        if self.session is None:
            return
        self.session = self.session.on_chain(parse_chain_id(chain_id))
        self._next_generation()
        logger.info(f"Chain changed to {self.session.chain_id}")

    # Pipeline

    def _commit(self, generation: int, report: CollectionReport) -> Optional[CollectionReport]:
        if generation != self._generation:
            logger.warning(
                f"Discarding result of stale scan (generation {generation}, current {self._generation})"
            )
            return self._report
        self._report = report
        return report

    async def refresh(self) -> Optional[CollectionReport]:
        """
        Rescan the connected wallet and rebuild the report

        Returns the new report, or the current one (None before any scan
        completed) if this scan was superseded while running. Raises ScanError if the scan as a whole
        fails, leaving the previous report in place.
        """
        generation = self._next_generation()
        session = self.session

        if session is None:
            result = await self.scanner.scan(None, self.collection_contract, self.collection.max_token_id)
            return self._commit(generation, CollectionReport(result=result.model_copy(update={"generation": generation})))

        expected_chain = self.config.chain_id
        if expected_chain is not None and session.chain_id is not None and session.chain_id != expected_chain:
            logger.warning(f"Wallet is on chain {session.chain_id}, expected {expected_chain}")
            result = ScanResult.wrong_network(session.address).model_copy(update={"generation": generation})
            return self._commit(generation, CollectionReport(result=result))

        self._in_flight += 1
        try:
            result = await self.scanner.scan(
                session.address, self.collection_contract, self.collection.max_token_id
            )
            claims = None
            if self.registry_contract is not None and result.status == ScanStatus.COMPLETE:
                tokens, claims = await self.merger.merge(result.tokens, self.registry_contract, session.address)
                result = result.replace_tokens(tokens)
        except Exception as e:
            logger.error(f"Error fetching collection for {session.address}: {e}")
            if generation == self._generation:
                self.last_error = e
            raise ScanError(f"Could not retrieve collection for {session.address}: {e}") from e
        finally:
            self._in_flight -= 1

        result = result.model_copy(update={"generation": generation})
        traits = aggregate(result, self.collection.required_traits)
        report = self._commit(generation, CollectionReport(result=result, claims=claims, traits=traits))
        if generation == self._generation:
            self.last_error = None
        return report

    async def register_nft(self, token_id: int, trait: Optional[str] = None) -> Any:
        """
        Register one token with the claim registry

        On confirmation the token's flag is flipped in the current report
        without rescanning. On failure the flag is untouched and
        RegistrationError is raised.
        """
        if self.session is None:
            raise NotConnectedError("Connect a wallet before registering NFTs")
        if self.registry_contract is None:
            raise RegistrationError(token_id, "no registry contract configured")

        if trait is None:
            record = self.result.get(token_id) if self.result is not None else None
            if record is None:
                raise RegistrationError(token_id, "trait unknown, scan the wallet first or pass it explicitly")
            trait = record.trait

        receipt = await self.merger.register_nft(self.w3, self.registry_contract, self.session, token_id, trait)

        current = self._report
        if current is not None and current.result.get(token_id) is not None:
            self._report = current.model_copy(update={"result": current.result.mark_registered(token_id)})
        return receipt
