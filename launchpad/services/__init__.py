from .prepayment import PrepaymentLedger
from .settlement import SettlementPolicy, Settlement, format_ether
from .workflow import WorkflowEngine
from .orchestrator import DeploymentOrchestrator
