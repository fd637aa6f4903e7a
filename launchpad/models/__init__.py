from .token import TokenParams, DeploymentResult, TipEvent
from .workflow import (
    WorkflowState,
    PrepaymentRecord,
    AWAITING_NAME,
    AWAITING_SYMBOL,
    AWAITING_SUPPLY,
    AWAITING_DECIMALS,
    AWAITING_ICON,
    AWAITING_CREATOR_BUY,
    AWAITING_GAS_PAYMENT,
    AWAITING_CONFIRM,
    STEP_ORDER,
)
