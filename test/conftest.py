"""
Shared fakes: clock, chat sender and ledger client
"""

import asyncio

import pytest
from web3 import Web3

from launchpad.config import Settings
from launchpad.controller import LaunchController
from launchpad.services.orchestrator import DeploymentOrchestrator
from launchpad.services.prepayment import PrepaymentLedger
from launchpad.services.settlement import SettlementPolicy
from launchpad.services.workflow import WorkflowEngine

DEPLOYER = Web3.to_checksum_address('0x' + 'de' * 20)
CREATOR = Web3.to_checksum_address('0x' + '12' * 20)
TOKEN = Web3.to_checksum_address('0x' + 'ab' * 20)
DEPLOY_HASH = '0x' + '11' * 32

ETH = 10 ** 18


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeSender:
    def __init__(self):
        self.messages = []
        self.reactions = []

    async def send_message(self, channel_id, text):
        self.messages.append((channel_id, text))

    async def send_reaction(self, channel_id, event_id, emoji):
        self.reactions.append((channel_id, event_id, emoji))

    @property
    def last(self) -> str:
        return self.messages[-1][1]

    def joined(self) -> str:
        return '\n'.join(text for _, text in self.messages)


class FakeLedgerClient:
    """Records submitted transactions instead of talking to a node"""

    def __init__(self, fail_deploy=False, revert_deploy=False, contract_address=TOKEN,
                 failing_calls=()):
        self.deployer_address = DEPLOYER
        self.fail_deploy = fail_deploy
        self.revert_deploy = revert_deploy
        self.contract_address = contract_address
        self.failing_calls = set(failing_calls)
        self.deployments = []
        self.calls = []
        self.deploy_gate = None  # asyncio.Event holding deployments open

    async def send_deployment(self, abi, bytecode, args):
        self.deployments.append(args)
        await asyncio.sleep(0)  # let other tasks run, like a real RPC round trip
        if self.deploy_gate is not None:
            await self.deploy_gate.wait()
        if self.fail_deploy:
            raise Exception('insufficient funds for gas')
        return DEPLOY_HASH

    async def send_call(self, address, abi, fn, args, value=0):
        self.calls.append((fn, args, value))
        if fn in self.failing_calls:
            raise Exception(f'{fn} reverted')
        return '0x' + f'{len(self.calls):064x}'

    async def wait_for_receipt(self, tx_hash):
        if tx_hash == DEPLOY_HASH:
            return {
                'status': 0 if self.revert_deploy else 1,
                'contractAddress': self.contract_address,
            }
        return {'status': 1, 'contractAddress': None}

    def called(self, fn):
        return [call for call in self.calls if call[0] == fn]


class FakeHistory:
    def __init__(self):
        self.records = []

    def record_deployment(self, telegram_id, params, result):
        self.records.append((telegram_id, params, result))


class LockedHistory:
    def record_deployment(self, telegram_id, params, result):
        raise RuntimeError('database is locked')


class Harness:
    """Controller wired to real services and fake collaborators"""

    def __init__(self, **ledger_kwargs):
        self.clock = FakeClock()
        self.settings = Settings()
        self.settlement = SettlementPolicy(self.settings.execution_cost, self.settings.token_price)
        self.prepayments = PrepaymentLedger(timeout=self.settings.prepayment_timeout, clock=self.clock)
        self.engine = WorkflowEngine(self.settlement, self.prepayments,
                                     timeout=self.settings.workflow_timeout, clock=self.clock)
        self.ledger_client = FakeLedgerClient(**ledger_kwargs)
        self.orchestrator = DeploymentOrchestrator(self.ledger_client, self.settlement, self.settings)
        self.sender = FakeSender()
        self.history = FakeHistory()
        self.controller = LaunchController(
            engine=self.engine,
            ledger=self.prepayments,
            settlement=self.settlement,
            orchestrator=self.orchestrator,
            sender=self.sender,
            deployer_address=DEPLOYER,
            explorer_url=self.settings.explorer_url,
            history=self.history,
        )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def harness():
    return Harness()
