"""
Database operations for deployment history and wallet links
"""

import sqlite3
import logging
from datetime import datetime
from typing import Optional, Tuple, Dict, List

# Configure SQLite to handle datetime properly for Python 3.12+
sqlite3.register_adapter(datetime, lambda dt: dt.isoformat())
sqlite3.register_converter("timestamp", lambda b: datetime.fromisoformat(b.decode()))


class DeploymentDatabase:
    """Handles all database operations for the launch bot

    Workflows and prepaid balances stay in memory; only wallet links,
    finished deployments and processed deposits are persisted.
    """

    def __init__(self, db_path: str = 'deployments.db'):
        """Initialize database connection"""
        self.db_path = db_path
        self.logger = logging.getLogger(__name__)
        self._setup_database()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path, detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES)

    def _setup_database(self):
        """Setup SQLite database for tracking deployments"""
        with self._connect() as conn:
            # Telegram user <-> wallet links
            conn.execute('''
                CREATE TABLE IF NOT EXISTS users (
                    telegram_id TEXT PRIMARY KEY,
                    eth_address TEXT,
                    chat_id TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            # One row per deployment attempt
            conn.execute('''
                CREATE TABLE IF NOT EXISTS deployments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    telegram_id TEXT,
                    creator TEXT,
                    token_name TEXT,
                    token_symbol TEXT,
                    total_supply TEXT,
                    decimals INTEGER,
                    creator_buy_wei TEXT,
                    token_address TEXT,
                    tx_hash TEXT,
                    status TEXT,
                    error TEXT,
                    deployed_at TIMESTAMP
                )
            ''')

            # Processed tips, so restarts never credit twice
            conn.execute('''
                CREATE TABLE IF NOT EXISTS deposits (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    telegram_id TEXT,
                    amount_wei TEXT,
                    tx_hash TEXT UNIQUE,
                    from_address TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            conn.execute('''
                CREATE INDEX IF NOT EXISTS idx_users_wallet
                ON users(eth_address)
            ''')

        self.logger.info("Database initialized")

    # ------------------------------------------------------------------
    # Wallet links
    # ------------------------------------------------------------------

    def link_wallet(self, telegram_id: str, eth_address: str, chat_id: Optional[str] = None) -> bool:
        """Link a wallet to a Telegram user

        Returns False if the wallet already belongs to somebody else.
        """
        eth_address = eth_address.lower()
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT telegram_id FROM users WHERE eth_address = ? AND telegram_id != ?",
                (eth_address, str(telegram_id))
            )
            if cursor.fetchone():
                self.logger.warning(f"Wallet {eth_address[:6]}...{eth_address[-4:]} already linked to another user")
                return False

            conn.execute('''
                INSERT INTO users (telegram_id, eth_address, chat_id)
                VALUES (?, ?, ?)
                ON CONFLICT(telegram_id) DO UPDATE SET
                    eth_address = excluded.eth_address,
                    chat_id = COALESCE(excluded.chat_id, users.chat_id)
            ''', (str(telegram_id), eth_address, str(chat_id) if chat_id is not None else None))

        self.logger.info(f"Wallet linked for {telegram_id}: {eth_address}")
        return True

    def get_wallet(self, telegram_id: str) -> Optional[str]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT eth_address FROM users WHERE telegram_id = ?",
                (str(telegram_id),)
            )
            result = cursor.fetchone()
            return result[0] if result else None

    def get_user_by_wallet(self, eth_address: str) -> Optional[Tuple[str, Optional[str]]]:
        """Find the user behind a wallet

        Returns:
            Tuple of (telegram_id, chat_id), or None
        """
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT telegram_id, chat_id FROM users WHERE LOWER(eth_address) = LOWER(?)",
                (eth_address,)
            )
            result = cursor.fetchone()
            return (result[0], result[1]) if result else None

    def update_chat(self, telegram_id: str, chat_id: str) -> None:
        """Remember the last chat a user talked to the bot in"""
        with self._connect() as conn:
            conn.execute(
                "UPDATE users SET chat_id = ? WHERE telegram_id = ?",
                (str(chat_id), str(telegram_id))
            )

    # ------------------------------------------------------------------
    # Deployments
    # ------------------------------------------------------------------

    def record_deployment(self, telegram_id: str, params, result) -> None:
        """Save a finished deployment attempt"""
        status = 'success' if result.success else 'failed'
        with self._connect() as conn:
            conn.execute('''
                INSERT INTO deployments
                (telegram_id, creator, token_name, token_symbol, total_supply, decimals,
                 creator_buy_wei, token_address, tx_hash, status, error, deployed_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                str(telegram_id), params.creator, params.name, params.symbol,
                str(params.total_supply), params.decimals, str(params.creator_buy_amount),
                result.token_address, result.tx_hash, status, result.error, datetime.now()
            ))
        self.logger.info(f"Deployment recorded: {params.symbol} ({status})")

    def get_recent_deployments(self, telegram_id: str, limit: int = 5) -> List[Tuple[str, str, str]]:
        """Get a user's latest successful deployments

        Returns:
            List of (token_symbol, token_address, tx_hash)
        """
        with self._connect() as conn:
            cursor = conn.execute('''
                SELECT token_symbol, token_address, tx_hash
                FROM deployments
                WHERE telegram_id = ? AND status = 'success'
                ORDER BY id DESC
                LIMIT ?
            ''', (str(telegram_id), limit))
            return cursor.fetchall()

    def get_deployment_stats(self) -> Dict:
        """Get deployment counts by status"""
        with self._connect() as conn:
            cursor = conn.execute('''
                SELECT
                    COUNT(*) as total,
                    SUM(CASE WHEN status = 'success' THEN 1 ELSE 0 END) as successful,
                    SUM(CASE WHEN status = 'failed' THEN 1 ELSE 0 END) as failed
                FROM deployments
            ''')
            total, successful, failed = cursor.fetchone()
            return {
                'total': total or 0,
                'successful': successful or 0,
                'failed': failed or 0,
            }

    # ------------------------------------------------------------------
    # Deposits
    # ------------------------------------------------------------------

    def is_deposit_processed(self, tx_hash: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT id FROM deposits WHERE tx_hash = ?",
                (tx_hash,)
            )
            return cursor.fetchone() is not None

    def record_deposit(self, tx_hash: str, from_address: str, amount_wei: int,
                       telegram_id: Optional[str] = None) -> bool:
        """Mark a tip transaction as processed

        Returns False if it was already recorded.
        """
        try:
            with self._connect() as conn:
                conn.execute('''
                    INSERT INTO deposits (telegram_id, amount_wei, tx_hash, from_address)
                    VALUES (?, ?, ?, ?)
                ''', (telegram_id or 'UNREGISTERED', str(amount_wei), tx_hash, from_address.lower()))
            return True
        except sqlite3.IntegrityError:
            self.logger.debug(f"Deposit {tx_hash} already recorded")
            return False
