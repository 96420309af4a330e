"""
Provisioning engine.

Turns an authenticated identity into exactly one profile and one wallet.
Registration, OAuth completion and session resume all call provision()
for the same identity without coordinating with each other, possibly
from different processes. The existence check is advisory only: a
DuplicateKeyError on insert is what actually guarantees a single row,
and it is treated as success.

Example:
    >>> engine = ProvisioningEngine(profile_repo, wallet_repo, app_context)
    >>> outcome = await engine.provision(identity, context)
    >>> outcome.state
    <ProvisioningState.READY: 'ready'>
"""

import asyncio
import itertools
from dataclasses import replace
from typing import Optional

from accueil.application.context.app_context import ApplicationContext
from accueil.application.provisioning.states import (
    ErrorKind,
    ProvisioningError,
    ProvisioningOutcome,
    ProvisioningState,
    TERMINAL_STATES,
    check_transition,
)
from accueil.domain.entities.identity import Identity
from accueil.domain.entities.profile import Profile
from accueil.domain.entities.wallet import Wallet
from accueil.domain.exceptions import (
    ConstraintViolationError,
    DuplicateKeyError,
    EntityNotFoundError,
    NetworkError,
    ProvisioningStateError,
    RecordStoreError,
    ValidationError,
)
from accueil.domain.repositories.i_profile_repository import IProfileRepository
from accueil.domain.repositories.i_wallet_repository import IWalletRepository
from accueil.domain.value_objects.registration_context import (
    REQUIRED_FIELDS,
    RegistrationContext,
)
from accueil.infrastructure.monitoring.logger import get_logger, identity_id_ctx
from accueil.infrastructure.monitoring.metrics import (
    provisioning_runs_total,
    wallet_heal_total,
)

logger = get_logger(__name__)

EMAIL_UNCONFIRMED_MESSAGE = (
    "Please check your email and click the confirmation link to complete "
    "registration."
)
NETWORK_MESSAGE = "We couldn't reach the server. Please try again."
CONSTRAINT_MESSAGE = (
    "We couldn't set up your account with these details. Please review them "
    "and try again."
)
INTERNAL_MESSAGE = "Something went wrong while setting up your account."


class _Run:
    """State of a single provision() call."""

    _ids = itertools.count(1)

    def __init__(self, identity: Identity, generation: int):
        self.id = next(self._ids)
        self.identity = identity
        self.generation = generation
        self.state = ProvisioningState.UNAUTHENTICATED

    def advance(self, target: ProvisioningState) -> None:
        check_transition(self.state, target)
        logger.debug(
            f"Provisioning run {self.id}: {self.state.value} -> {target.value}",
            extra={"extra": {"run": self.id, "state": target.value}},
        )
        self.state = target


class ProvisioningEngine:
    """
    Provisioning state machine for the signed-in identity.

    Business rules:
    - Unverified email halts in AWAITING_EMAIL_CONFIRMATION, no store calls
    - A failed profile lookup is an ERROR, never "profile missing"
    - No profile is inserted without name, school, department and level
    - DuplicateKeyError on profile or wallet insert means success
    - Wallet insert failure leaves the user READY with a degraded wallet
    - The engine never retries by itself

    Presentation boundary:
    - current_state, missing_fields, last_error, wallet_degraded, snapshot()
    - submit_profile_context(), retry(), ensure_wallet(), reset()

    Concurrent provision() calls for the same identity without a new
    context share one in-flight run. That only saves round trips;
    separate engines racing on one store still converge.
    """

    def __init__(
        self,
        profile_repository: IProfileRepository,
        wallet_repository: IWalletRepository,
        app_context: Optional[ApplicationContext] = None,
    ):
        """
        Initialize engine with dependencies.

        Args:
            profile_repository: Record store for profiles
            wallet_repository: Record store for wallets
            app_context: Session state populated when a user is ready
        """
        self.profile_repository = profile_repository
        self.wallet_repository = wallet_repository
        self.app_context = app_context or ApplicationContext()

        self._identity: Optional[Identity] = None
        self._context: Optional[RegistrationContext] = None
        self._snapshot = ProvisioningOutcome(state=ProvisioningState.UNAUTHENTICATED)
        self._generation = 0
        self._ready_before = 0
        self._latest_run_id = 0
        self._in_flight: dict[str, asyncio.Task] = {}

    # ================================================================
    # Presentation boundary
    # ================================================================

    @property
    def current_state(self) -> ProvisioningState:
        return self._snapshot.state

    @property
    def missing_fields(self) -> tuple[str, ...]:
        return self._snapshot.missing_fields

    @property
    def last_error(self) -> Optional[ProvisioningError]:
        return self._snapshot.error

    @property
    def wallet_degraded(self) -> bool:
        return self._snapshot.wallet_degraded

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    def snapshot(self) -> ProvisioningOutcome:
        """Return the state the presentation layer should render."""
        return self._snapshot

    async def submit_profile_context(
        self,
        context: RegistrationContext,
    ) -> ProvisioningOutcome:
        """
        Resume a run halted for missing profile fields.

        Valid in AWAITING_PROFILE_INPUT, and after a non-recoverable
        ERROR where corrected details are the way forward.

        Raises:
            ProvisioningStateError: If no run is waiting for input
        """
        state = self.current_state
        waiting = state is ProvisioningState.AWAITING_PROFILE_INPUT
        rejected = (
            state is ProvisioningState.ERROR
            and self.last_error is not None
            and not self.last_error.recoverable
        )
        if self._identity is None or not (waiting or rejected):
            raise ProvisioningStateError("submit profile details", state.value)

        return await self.provision(self._identity, context)

    async def retry(self) -> ProvisioningOutcome:
        """
        Re-run provisioning after a recoverable error.

        Raises:
            ProvisioningStateError: If the last run did not end in a
                recoverable ERROR
        """
        error = self.last_error
        if (
            self._identity is None
            or self.current_state is not ProvisioningState.ERROR
            or error is None
            or not error.recoverable
        ):
            raise ProvisioningStateError("retry", self.current_state.value)

        return await self.provision(self._identity, self._context)

    def reset(self) -> None:
        """Forget the current identity (sign-out)."""
        self._identity = None
        self._context = None
        self._generation += 1
        # runs still in flight belong to the old generation and are never joined
        self._in_flight.clear()
        self._snapshot = ProvisioningOutcome(state=ProvisioningState.UNAUTHENTICATED)

    # ================================================================
    # Provisioning
    # ================================================================

    async def provision(
        self,
        identity: Identity,
        context: Optional[RegistrationContext] = None,
    ) -> ProvisioningOutcome:
        """
        Provision profile and wallet for an identity.

        Args:
            identity: Authenticated identity
            context: Registration form data, if the entry point has it

        Returns:
            Outcome of the run (READY, AWAITING_*, or ERROR)
        """
        self._adopt(identity, context)

        if context is None:
            in_flight = self._in_flight.get(identity.id)
            if in_flight is not None and not in_flight.done():
                logger.debug(f"Joining in-flight provisioning for {identity.id}")
                return await asyncio.shield(in_flight)

        run = _Run(identity, self._generation)
        self._latest_run_id = run.id

        task = asyncio.ensure_future(self._run(run, context))
        self._in_flight[identity.id] = task
        task.add_done_callback(
            lambda done, key=identity.id: self._forget_in_flight(key, done)
        )
        return await asyncio.shield(task)

    def _adopt(
        self,
        identity: Identity,
        context: Optional[RegistrationContext],
    ) -> None:
        """Make identity the engine's current one, keeping its context."""
        if self._identity is None or self._identity.id != identity.id:
            self._context = None
            self._ready_before = 0
        self._identity = identity
        if context is not None:
            self._context = context

    def _forget_in_flight(self, key: str, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def _run(
        self,
        run: _Run,
        context: Optional[RegistrationContext],
    ) -> ProvisioningOutcome:
        token = identity_id_ctx.set(run.identity.id)
        try:
            return await self._drive(run, context)
        except Exception:
            logger.exception("Provisioning run failed unexpectedly")
            if run.state not in TERMINAL_STATES:
                self._advance(run, ProvisioningState.ERROR)
                self._finish(
                    run,
                    error=ProvisioningError(
                        ErrorKind.INTERNAL, INTERNAL_MESSAGE, recoverable=False
                    ),
                )
            raise
        finally:
            identity_id_ctx.reset(token)

    async def _drive(
        self,
        run: _Run,
        context: Optional[RegistrationContext],
    ) -> ProvisioningOutcome:
        identity = run.identity
        self._advance(run, ProvisioningState.AUTHENTICATED)

        if not identity.email_verified:
            self._advance(run, ProvisioningState.AWAITING_EMAIL_CONFIRMATION)
            logger.info("Email not confirmed yet, provisioning deferred")
            return self._finish(
                run,
                error=ProvisioningError(
                    ErrorKind.EMAIL_UNCONFIRMED,
                    EMAIL_UNCONFIRMED_MESSAGE,
                    recoverable=True,
                ),
            )

        self._advance(run, ProvisioningState.CHECKING_PROFILE)
        try:
            existing = await self.profile_repository.find_profile(identity.id)
        except (NetworkError, RecordStoreError) as e:
            return self._fail(run, e)

        if existing is not None:
            self._advance(run, ProvisioningState.PROFILE_FOUND)
            return await self._complete_existing(run, existing)

        self._advance(run, ProvisioningState.PROFILE_MISSING)
        resolved = self._resolve_context(identity, context)
        if resolved is None or (context is None and not resolved.is_complete()):
            self._advance(run, ProvisioningState.AWAITING_PROFILE_INPUT)
            logger.info("Profile missing, waiting for registration details")
            missing = resolved.missing_fields() if resolved else REQUIRED_FIELDS
            return self._finish(run, missing_fields=missing)

        try:
            new_profile = Profile.from_registration(identity, resolved)
        except ValidationError as e:
            self._advance(run, ProvisioningState.AWAITING_PROFILE_INPUT)
            missing = resolved.missing_fields() or (e.field,)
            logger.info(f"Registration details rejected: {e.message}")
            return self._finish(
                run,
                missing_fields=missing,
                error=ProvisioningError(
                    ErrorKind.VALIDATION, e.message, recoverable=True
                ),
            )

        self._advance(run, ProvisioningState.CREATING_PROFILE)
        try:
            profile = await self.profile_repository.insert_profile(new_profile)
        except DuplicateKeyError:
            logger.info("Profile already created by a concurrent run")
            self._advance(run, ProvisioningState.PROFILE_FOUND)
            winner = await self._reload_profile(identity.id, fallback=new_profile)
            return await self._complete_existing(run, winner)
        except (NetworkError, RecordStoreError) as e:
            return self._fail(run, e)

        logger.info("Profile created")
        self._advance(run, ProvisioningState.CREATING_WALLET)
        wallet, degraded = await self._create_wallet(identity.id)

        self._advance(run, ProvisioningState.READY)
        return self._finish(run, profile=profile, wallet=wallet, degraded=degraded)

    def _resolve_context(
        self,
        identity: Identity,
        context: Optional[RegistrationContext],
    ) -> Optional[RegistrationContext]:
        """
        Pick the registration context for a first-time identity.

        Order: explicit context (blanks filled from signup metadata),
        then a context submitted earlier to this engine, then signup
        metadata. Returns None when nothing was ever supplied.
        """
        from_metadata = RegistrationContext.from_metadata(identity.metadata)

        if context is not None:
            return context.merged_with(from_metadata)

        if (
            self._context is not None
            and self._identity is not None
            and self._identity.id == identity.id
        ):
            return self._context.merged_with(from_metadata)

        if from_metadata.missing_fields() != REQUIRED_FIELDS:
            return from_metadata

        return None

    async def _complete_existing(
        self,
        run: _Run,
        profile: Profile,
    ) -> ProvisioningOutcome:
        """PROFILE_FOUND -> READY, loading the wallet best effort."""
        wallet, degraded = await self._load_wallet(profile.id)
        self._advance(run, ProvisioningState.READY)
        return self._finish(run, profile=profile, wallet=wallet, degraded=degraded)

    async def _reload_profile(self, profile_id: str, fallback: Profile) -> Profile:
        """Read the row a concurrent run inserted, falling back to ours."""
        try:
            profile = await self.profile_repository.find_profile(profile_id)
        except (NetworkError, RecordStoreError) as e:
            logger.warning(f"Could not reload concurrently created profile: {e}")
            return fallback

        return profile or fallback

    async def _load_wallet(self, user_id: str) -> tuple[Optional[Wallet], bool]:
        """
        Load the wallet without writing.

        Returns:
            (wallet or None, degraded flag)
        """
        try:
            wallet = await self.wallet_repository.find_wallet(user_id)
        except (NetworkError, RecordStoreError) as e:
            logger.warning(f"Wallet could not be loaded, continuing degraded: {e}")
            return None, True

        if wallet is None:
            logger.warning("Profile has no wallet, continuing degraded")
            return None, True

        return wallet, False

    async def _create_wallet(self, user_id: str) -> tuple[Optional[Wallet], bool]:
        """
        Insert the opening wallet.

        Failure is logged and reported as degraded, never raised.

        Returns:
            (wallet or None, degraded flag)
        """
        try:
            wallet = await self.wallet_repository.insert_wallet(
                Wallet.opening(user_id)
            )
        except DuplicateKeyError:
            logger.info("Wallet already created by a concurrent run")
            wallet, _ = await self._load_wallet(user_id)
            return wallet, False
        except (NetworkError, RecordStoreError) as e:
            logger.warning(f"Wallet creation failed, will heal lazily: {e}")
            return None, True

        logger.info("Wallet created")
        return wallet, False

    async def ensure_wallet(self, user_id: Optional[str] = None) -> Wallet:
        """
        Return the user's wallet, creating it if it is still missing.

        This is the lazy repair for a profile left without a wallet.
        It only inserts when no wallet exists and treats a concurrent
        insert as success, so there is never more than one wallet.

        Args:
            user_id: Profile id (defaults to the current identity)

        Returns:
            The user's wallet

        Raises:
            ProvisioningStateError: If no user is given or signed in
            EntityNotFoundError: If the user has no profile
            NetworkError: If the record store cannot be reached
        """
        if user_id is None:
            if self._identity is None:
                raise ProvisioningStateError("load wallet", self.current_state.value)
            user_id = self._identity.id

        wallet = await self.wallet_repository.find_wallet(user_id)
        if wallet is not None:
            self._wallet_healed(user_id, wallet)
            return wallet

        if await self.profile_repository.find_profile(user_id) is None:
            raise EntityNotFoundError(entity_type="Profile", entity_id=user_id)

        try:
            wallet = await self.wallet_repository.insert_wallet(
                Wallet.opening(user_id)
            )
            wallet_heal_total.labels(result="created").inc()
            logger.info(f"Healed missing wallet for {user_id}")
        except DuplicateKeyError:
            wallet_heal_total.labels(result="exists").inc()
            wallet = await self.wallet_repository.find_wallet(user_id)
            if wallet is None:
                raise EntityNotFoundError(entity_type="Wallet", entity_id=user_id)
        except (NetworkError, RecordStoreError):
            wallet_heal_total.labels(result="failed").inc()
            raise

        self._wallet_healed(user_id, wallet)
        return wallet

    def _wallet_healed(self, user_id: str, wallet: Wallet) -> None:
        """Clear the degraded flag once a wallet is known."""
        if (
            self._snapshot.identity_id == user_id
            and self._snapshot.profile is not None
        ):
            self._snapshot = replace(
                self._snapshot, wallet=wallet, wallet_degraded=False
            )
        self.app_context.update_wallet(wallet)

    # ================================================================
    # Run bookkeeping
    # ================================================================

    def _advance(self, run: _Run, target: ProvisioningState) -> None:
        """Advance a run and mirror in-progress states for the latest run."""
        run.advance(target)
        if target in TERMINAL_STATES:
            # published with its details by _finish()
            return
        if run.id == self._latest_run_id and self._may_publish(run, target):
            self._snapshot = ProvisioningOutcome(
                state=target,
                identity_id=run.identity.id,
                suggested_name=run.identity.display_name,
            )

    def _may_publish(self, run: _Run, state: ProvisioningState) -> bool:
        """
        Whether a run may replace the presentation snapshot.

        Runs for a previous identity (or from before a reset) are
        stale. A READY is never overwritten by a run that started
        before it was published.
        """
        if (
            self._identity is None
            or self._identity.id != run.identity.id
            or run.generation != self._generation
        ):
            return False

        return not (
            self._ready_before
            and state is not ProvisioningState.READY
            and run.id < self._ready_before
        )

    def _fail(self, run: _Run, error: Exception) -> ProvisioningOutcome:
        """Move a run to ERROR for a store failure."""
        self._advance(run, ProvisioningState.ERROR)

        if isinstance(error, ConstraintViolationError):
            logger.error(f"Profile creation rejected by record store: {error}")
            surfaced = ProvisioningError(
                ErrorKind.CONSTRAINT, CONSTRAINT_MESSAGE, recoverable=False
            )
        else:
            logger.warning(f"Provisioning interrupted by store failure: {error}")
            surfaced = ProvisioningError(
                ErrorKind.NETWORK, NETWORK_MESSAGE, recoverable=True
            )

        return self._finish(run, error=surfaced)

    def _finish(
        self,
        run: _Run,
        profile: Optional[Profile] = None,
        wallet: Optional[Wallet] = None,
        degraded: bool = False,
        missing_fields: tuple[str, ...] = (),
        error: Optional[ProvisioningError] = None,
    ) -> ProvisioningOutcome:
        """Build the run outcome and publish it if it is still relevant."""
        outcome = ProvisioningOutcome(
            state=run.state,
            identity_id=run.identity.id,
            profile=profile,
            wallet=wallet,
            wallet_degraded=degraded,
            missing_fields=tuple(missing_fields),
            error=error,
            suggested_name=run.identity.display_name,
        )
        provisioning_runs_total.labels(state=run.state.value).inc()
        return self._publish(run, outcome)

    def _publish(
        self,
        run: _Run,
        outcome: ProvisioningOutcome,
    ) -> ProvisioningOutcome:
        """Expose an outcome to the presentation layer and app context."""
        if not self._may_publish(run, outcome.state):
            logger.debug(f"Dropping outcome of superseded run {run.id}")
            return outcome

        previous = self._snapshot
        if (
            outcome.is_ready
            and outcome.wallet is None
            and previous.is_ready
            and previous.identity_id == outcome.identity_id
            and previous.wallet is not None
        ):
            # a concurrent run already loaded the wallet
            outcome = replace(outcome, wallet=previous.wallet, wallet_degraded=False)

        self._snapshot = outcome

        if outcome.state is ProvisioningState.READY and outcome.profile is not None:
            self._ready_before = self._latest_run_id + 1
            self.app_context.init(
                identity=run.identity,
                profile=outcome.profile,
                wallet=outcome.wallet,
                wallet_degraded=outcome.wallet_degraded,
            )

        return outcome
