import json
import os
import random
import sys
import time
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, List, Optional

import requests
from eth_account.messages import encode_defunct
from loguru import logger
from requests.cookies import create_cookie
from requests.exceptions import ConnectionError, ConnectTimeout, HTTPError, ProxyError, SSLError
from web3 import Web3

# Configuration
BASE_URL = "https://token.gpu.net"
AUTH_API_URL = "https://quest-api.gpu.net/api"
PK_FILE = os.environ.get("GPUNET_PK_FILE", "pk.txt")
PROXY_FILE = os.environ.get("GPUNET_PROXY_FILE", "proxy.txt")
COOKIE_FILE = os.environ.get("GPUNET_COOKIE_FILE", "gpu_net_cookies.json")
LOG_FILE = os.environ.get("GPUNET_LOG_FILE", "gpu_net.log")
CYCLE_INTERVAL_HOURS = float(os.environ.get("GPUNET_INTERVAL_HOURS", "24"))
REQUEST_TIMEOUT = 30  # seconds

# Pacing (seconds)
STEP_DELAY = 3
STREAK_MAX_ATTEMPTS = 3
STREAK_RETRY_DELAY = 2
TASK_PRE_VERIFY_DELAY = (1, 3)
TASK_POST_VERIFY_DELAY = (1, 2)
ACCOUNT_DELAY_RANGE = (5, 10)

# Post-auth steps in execution order, with the wait taken before each one
STEP_DELAYS = (
    ("profile", STEP_DELAY),
    ("streak", STEP_DELAY),
    ("tasks", STEP_DELAY),
    ("experience", STEP_DELAY),
)

# Sign-In with Ethereum constants
SIWE_DOMAIN = "token.gpu.net"
SIWE_URI = "https://token.gpu.net"
SIWE_STATEMENT = "Sign in with Ethereum to the app."
SIWE_VERSION = "1"
SIWE_CHAIN_ID = 4048
UNKNOWN_NONCE = "unknown-nonce"

# Headers setup
DEFAULT_HEADERS = {
    "accept": "application/json, text/plain, */*",
    "accept-language": "en-GB,en-US;q=0.9,en;q=0.8",
    "origin": BASE_URL,
    "referer": f"{BASE_URL}/",
    "priority": "u=1, i",
    "sec-ch-ua": "\"Google Chrome\";v=\"135\", \"Not-A.Brand\";v=\"8\", \"Chromium\";v=\"135\"",
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": "\"Windows\"",
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "same-site",
    "user-agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/135.0.0.0 Safari/537.36"
}

DOCUMENT_HEADERS = {
    "sec-fetch-dest": "document",
    "sec-fetch-mode": "navigate",
    "sec-fetch-site": "none",
    "sec-fetch-user": "?1",
    "upgrade-insecure-requests": "1"
}


def setup_logging(log_file=LOG_FILE):
    """Send logs to stdout and an append-only file, both with ISO-8601 UTC timestamps"""
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DDTHH:mm:ss.SSS!UTC}Z</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level="INFO",
        colorize=True
    )
    logger.add(
        log_file,
        format="{time:YYYY-MM-DDTHH:mm:ss.SSS!UTC}Z | {level: <8} | {message}",
        level="DEBUG",
        rotation="5 MB"
    )


class WalletListError(Exception):
    """The private key list is missing, unreadable or empty"""


def _response_body(response):
    """Decoded JSON body, or the raw text when the body is not JSON"""
    try:
        return response.json()
    except ValueError:
        return response.text.strip()


# Input files
def read_private_keys(path=PK_FILE):
    """Read one key per line, skipping blank lines and '#' comments"""
    try:
        with open(path, "r") as file:
            keys = [line.strip() for line in file]
    except OSError as e:
        logger.error(f"Error reading private keys file: {str(e)}")
        raise WalletListError(f"cannot read {path}: {e}") from e

    keys = [key for key in keys if key and not key.startswith("#")]
    if not keys:
        logger.error(f"No private keys found. Please add your private keys to {path}")
        raise WalletListError(f"no private keys in {path}")
    return keys


def load_proxy(path=PROXY_FILE):
    """Return the first proxy from the proxy file, or None to run without one"""
    if not os.path.exists(path):
        return None

    try:
        with open(path, "r") as file:
            for line in file:
                proxy = line.strip()
                if not proxy or proxy.startswith("#"):
                    continue
                if not proxy.startswith("http"):
                    proxy = f"http://{proxy}"
                logger.success(f"Using proxy from {path}: {mask_proxy(proxy)}")
                return proxy
    except OSError as e:
        logger.error(f"Error reading {path}: {str(e)}")

    logger.warning(f"No proxies found in {path}. Will run without proxies.")
    return None


def mask_proxy(proxy):
    """Hide the user:pass part of a proxy URL"""
    scheme, sep, rest = proxy.partition("://")
    if not sep:
        scheme, rest = "", proxy
    if "@" not in rest:
        return proxy
    host = rest.rsplit("@", 1)[1]
    return f"{scheme}{sep}***@{host}"


# Session store
class CookieStore:
    """Persists the shared session's cookie jar as JSON between runs"""

    def __init__(self, session, path=COOKIE_FILE):
        self.session = session
        self.path = path

    def load(self):
        """Restore cookies from disk. Returns whether any cookie file was restored."""
        if not os.path.exists(self.path):
            logger.info("No cookie file found, will create a new session")
            return False

        try:
            with open(self.path, "r") as file:
                stored = json.load(file)
            cookies = [create_cookie(**item) for item in stored]
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error loading cookies: {str(e)}")
            return False

        for cookie in cookies:
            self.session.cookies.set_cookie(cookie)
        logger.info(f"Loaded {len(cookies)} cookies from file")
        return True

    def save(self):
        """Write every cookie in the jar to disk. Returns whether the write succeeded."""
        try:
            cookies = [self._serialize(cookie) for cookie in self.session.cookies]
            with open(self.path, "w") as file:
                json.dump(cookies, file, indent=2, sort_keys=True)
            logger.debug(f"Cookies saved to {self.path}")
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving cookies: {str(e)}")
            return False

    @staticmethod
    def _serialize(cookie):
        return {
            "name": cookie.name,
            "value": cookie.value,
            "domain": cookie.domain,
            "path": cookie.path,
            "port": cookie.port,
            "expires": cookie.expires,
            "secure": cookie.secure,
            "discard": cookie.discard,
            "rest": dict(getattr(cookie, "_rest", {}) or {}),
        }


class SessionContext:
    """The single HTTP session shared by every wallet in a cycle.

    Only one wallet can be authenticated under this cookie jar at a time, so
    every component that talks to the quest API is handed this object
    explicitly and accounts are processed one after another.
    """

    def __init__(self, session=None, cookie_file=COOKIE_FILE, api_url=AUTH_API_URL,
                 base_url=BASE_URL, proxy=None, timeout=REQUEST_TIMEOUT):
        self.session = session or requests.Session()
        self.api_url = api_url
        self.base_url = base_url
        self.timeout = timeout
        self.headers = dict(DEFAULT_HEADERS)
        self.cookies = CookieStore(self.session, cookie_file)
        if proxy:
            self.session.proxies.update({"http": proxy, "https": proxy})

    def request(self, method, path, **kwargs):
        """Make one HTTP request, log any failure with its details and re-raise it"""
        url = path if path.startswith("http") else f"{self.api_url}{path}"
        headers = dict(self.headers)
        headers.update(kwargs.pop("headers", None) or {})
        kwargs.setdefault("timeout", self.timeout)

        try:
            response = self.session.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            return response
        except HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            body = e.response.text if e.response is not None else ""
            logger.error(f"{method} {url} failed with HTTP {status}")
            logger.error(f"Response data: {body}")
            raise
        except ProxyError as e:
            logger.error(f"{method} {url} | Proxy error: {str(e)}")
            raise
        except SSLError as e:
            logger.error(f"{method} {url} | SSL error: {str(e)}")
            raise
        except ConnectTimeout as e:
            logger.error(f"{method} {url} | Connection timeout: {str(e)}")
            raise
        except ConnectionError as e:
            logger.error(f"{method} {url} | Connection error: {str(e)}")
            raise
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} | Request error: {str(e)}")
            raise

    def get(self, path, **kwargs):
        return self.request("GET", path, **kwargs)

    def post(self, path, **kwargs):
        return self.request("POST", path, **kwargs)

    def checkpoint(self):
        """Best-effort cookie save; a failure never aborts the caller"""
        try:
            return self.cookies.save()
        except Exception as e:
            logger.warning(f"Error saving cookies, continuing anyway: {str(e)}")
            return False

    def visit_landing_page(self):
        """Load the main site like a browser would so the server sets its cookies"""
        logger.info("Initializing session by visiting the main page...")
        try:
            response = self.get(self.base_url, headers=DOCUMENT_HEADERS)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error initializing session: {str(e)}")
            return False

        logger.info(f"Main page visited. Status: {response.status_code}")
        logger.info(f"Initial cookies received: {len(self.session.cookies)}")
        return True


# Wallet signing
def normalize_key(private_key):
    private_key = private_key.strip()
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    return private_key


def mask_key(private_key):
    """Only the first 6 and last 4 characters of a key ever reach the logs"""
    return f"{private_key[:6]}...{private_key[-4:]}"


class WalletSigner:
    """Derives addresses from private keys and signs EIP-191 personal messages"""

    def __init__(self):
        self.w3 = Web3()

    def address_of(self, private_key):
        return self.w3.eth.account.from_key(normalize_key(private_key)).address

    def sign(self, private_key, message):
        signed_message = self.w3.eth.account.sign_message(
            encode_defunct(text=message), private_key=normalize_key(private_key)
        )
        signature = signed_message.signature.hex()

        # Ensure signature has 0x prefix
        if not signature.startswith("0x"):
            signature = "0x" + signature
        return signature


# Authentication
class AuthState(Enum):
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class SignedMessage:
    message: str
    signature: str
    address: str


@dataclass
class AuthOutcome:
    state: AuthState
    address: str
    payload: Any = None

    @property
    def authenticated(self):
        return self.state is AuthState.AUTHENTICATED


def extract_nonce(nonce_data):
    """Pull the nonce out of any response shape the server has used.

    Accepts a bare string, ``{"nonce": ...}`` or ``{"data": {"nonce": ...}}``.
    Anything else yields UNKNOWN_NONCE, which signs fine but will be rejected
    by the verify endpoint.
    """
    if isinstance(nonce_data, str):
        return nonce_data
    if isinstance(nonce_data, dict):
        if nonce_data.get("nonce"):
            return nonce_data["nonce"]
        data = nonce_data.get("data")
        if isinstance(data, dict) and data.get("nonce"):
            return data["nonce"]
    return UNKNOWN_NONCE


def format_issued_at(moment):
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def build_sign_in_message(address, nonce, issued_at=None):
    issued_at = issued_at or datetime.now(timezone.utc)
    return (
        f"{SIWE_DOMAIN} wants you to sign in with your Ethereum account:\n"
        f"{address}\n"
        f"\n"
        f"{SIWE_STATEMENT}\n"
        f"\n"
        f"URI: {SIWE_URI}\n"
        f"Version: {SIWE_VERSION}\n"
        f"Chain ID: {SIWE_CHAIN_ID}\n"
        f"Nonce: {nonce}\n"
        f"Issued At: {format_issued_at(issued_at)}"
    )


class AuthProtocol:
    """Nonce -> sign -> verify challenge for one wallet.

    Transport failures raise and abort the account. A verify call answered
    with HTTP 500 and a body is a rejection, returned as ``{"error", "status"}``
    so the caller can record a normal failed result.
    """

    def __init__(self, ctx, signer=None):
        self.ctx = ctx
        self.signer = signer or WalletSigner()

    def fetch_nonce(self, address=None):
        logger.info("Getting nonce...")
        params = {"address": address} if address else None
        response = self.ctx.get("/auth/eth/nonce", params=params)
        nonce_data = _response_body(response)
        logger.debug(f"Full nonce response: {json.dumps(nonce_data)}")
        self.ctx.checkpoint()
        return nonce_data

    def sign_in(self, private_key, nonce_data, issued_at=None):
        address = self.signer.address_of(private_key)
        message = build_sign_in_message(address, extract_nonce(nonce_data), issued_at)
        signature = self.signer.sign(private_key, message)
        logger.debug(f"Generated message: {message}")
        logger.debug(f"Generated signature: {signature}")
        return SignedMessage(message=message, signature=signature, address=address)

    def verify(self, signed):
        logger.info("Sending verify request...")
        try:
            response = self.ctx.post(
                "/auth/eth/verify",
                json={"message": signed.message, "signature": signed.signature},
                headers={"content-type": "application/json"}
            )
        except HTTPError as e:
            if e.response is not None and e.response.status_code == 500 and e.response.content:
                logger.warning("Got a 500 error but returning available data")
                return {"error": _response_body(e.response), "status": e.response.status_code}
            raise

        self.ctx.checkpoint()
        return _response_body(response)

    def authenticate(self, private_key, address=None):
        address = address or self.signer.address_of(private_key)
        nonce_data = self.fetch_nonce(address)

        logger.info("Signing message...")
        signed = self.sign_in(private_key, nonce_data)
        logger.info("Message signed successfully")

        logger.info("Verifying signature...")
        result = self.verify(signed)
        logger.info(f"Authentication result: {json.dumps(result)}")

        if isinstance(result, dict) and "error" in result:
            return AuthOutcome(AuthState.REJECTED, address, result)
        return AuthOutcome(AuthState.AUTHENTICATED, address, result)


# Response shapes
def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class StreakInfo:
    current: float
    longest: float
    last_visit: str


def parse_streak(data):
    """A streak payload is only usable with both counters and a last-visit date; otherwise None"""
    if not isinstance(data, dict):
        return None

    current = data.get("streak", data.get("currentStreak"))
    longest = data.get("longestStreak")
    last_visit = data.get("lastVisitDate") or data.get("lastVisit") or data.get("lastVisitedAt")
    if not (_is_number(current) and _is_number(longest) and last_visit):
        return None
    return StreakInfo(current=current, longest=longest, last_visit=str(last_visit))


@dataclass
class SocialTask:
    id: str
    name: str = ""
    platform: str = ""
    description: str = ""
    completed: bool = False

    @classmethod
    def from_api(cls, data):
        return cls(
            id=str(data.get("id")),
            name=data.get("name") or data.get("title") or "",
            platform=data.get("platform") or "",
            description=data.get("description") or "",
            completed=bool(data.get("completed"))
        )


def extract_task_list(data):
    """Tasks arrive either as a bare list or wrapped under 'data' or 'tasks'"""
    if isinstance(data, dict):
        data = data.get("data", data.get("tasks"))
    if not isinstance(data, list):
        return []
    return [SocialTask.from_api(item) for item in data if isinstance(item, dict) and item.get("id") is not None]


class QuestApi:
    """Single-request quest endpoints that need an authenticated session"""

    def __init__(self, ctx):
        self.ctx = ctx

    def get_profile(self):
        logger.info("Getting user profile...")
        try:
            data = _response_body(self.ctx.get("/users/me"))
        except requests.exceptions.RequestException as e:
            logger.error(f"Error getting user profile: {str(e)}")
            return None

        if isinstance(data, dict):
            logger.info(
                f"User Profile - ID: {data.get('id')}, Current Streak: {data.get('currentStreak')}, "
                f"Rank: {data.get('rank')}, Twitter Connected: {data.get('isTwitterConnected')}"
            )
        return data

    def update_streak(self):
        """POST the daily streak. Raises on transport errors so the retry policy can count them."""
        logger.info("Updating streak...")
        data = _response_body(self.ctx.post("/users/streak", json={}))
        if isinstance(data, dict):
            logger.info(f"Streak Update - Current Streak: {data.get('streak')}, Longest Streak: {data.get('longestStreak')}")
        return data

    def get_experience(self):
        logger.info("Getting user experience...")
        try:
            data = _response_body(self.ctx.get("/users/exp"))
        except requests.exceptions.RequestException as e:
            logger.error(f"Error getting user experience: {str(e)}")
            return None

        logger.info(f"User Experience Data: {json.dumps(data)}")
        return data

    def list_social_tasks(self):
        logger.info("Getting social tasks...")
        try:
            data = _response_body(self.ctx.get("/users/social/tasks"))
        except requests.exceptions.RequestException as e:
            logger.error(f"Error getting social tasks: {str(e)}")
            return []
        return extract_task_list(data)

    def verify_social_task(self, task_id):
        return _response_body(self.ctx.get(f"/users/social/tasks/{task_id}/verify"))


# Retry policy
def with_retry(action, max_attempts=STREAK_MAX_ATTEMPTS, delay=STREAK_RETRY_DELAY, is_valid=None,
               label="request", sleep=time.sleep):
    """Call action until it returns a result that passes is_valid.

    Waits a fixed delay between attempts. Returns None once max_attempts are
    used up; never raises.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            result = action()
        except Exception as e:
            logger.warning(f"{label} attempt {attempt}/{max_attempts} failed: {str(e)}")
        else:
            if is_valid is None or is_valid(result):
                return result
            logger.warning(f"{label} attempt {attempt}/{max_attempts} returned an invalid payload: {result}")

        if attempt < max_attempts:
            logger.info(f"Retrying {label} in {delay} seconds... (Attempt {attempt + 1}/{max_attempts})")
            sleep(delay)

    logger.error(f"{label} failed after {max_attempts} attempts")
    return None


# Social tasks
@dataclass
class TaskReport:
    success: bool
    completed: int = 0
    total: int = 0
    already_completed: int = 0


def run_social_tasks(api, wallet_label="", sleep=time.sleep, rng=None):
    """Verify every incomplete social task once, in list order"""
    rng = rng or random
    tasks = api.list_social_tasks()
    if not tasks:
        logger.warning(f"{wallet_label}No social tasks found")
        return TaskReport(success=False)

    pending = [task for task in tasks if not task.completed]
    already_completed = len(tasks) - len(pending)
    logger.info(f"{wallet_label}Found {len(tasks)} social tasks, {len(pending)} pending")

    if not pending:
        logger.info(f"{wallet_label}All social tasks already completed")
        return TaskReport(success=True, total=len(tasks), already_completed=already_completed)

    completed = 0
    for task in pending:
        sleep(rng.uniform(*TASK_PRE_VERIFY_DELAY))
        logger.info(f"{wallet_label}Verifying task: {task.name} ({task.platform}, ID: {task.id})")

        try:
            result = api.verify_social_task(task.id)
        except Exception as e:
            logger.error(f"{wallet_label}Error verifying task {task.name}: {str(e)}")
            result = None

        if isinstance(result, dict) and result.get("success") is True:
            completed += 1
            logger.success(f"{wallet_label}Task verified: {task.name}")
        else:
            logger.warning(f"{wallet_label}Task not verified: {task.name} - {result}")

        sleep(rng.uniform(*TASK_POST_VERIFY_DELAY))

    logger.info(f"{wallet_label}Social tasks: {completed}/{len(pending)} newly completed, {already_completed} already done")
    return TaskReport(success=True, completed=completed, total=len(tasks), already_completed=already_completed)


# Account pipeline
@dataclass
class AccountResult:
    success: bool
    address: Optional[str] = None
    profile: Any = None
    streak: Any = None
    tasks: Optional[TaskReport] = None
    exp: Any = None
    error: Optional[str] = None
    auth_state: Optional[AuthState] = None

    def to_dict(self):
        result = {"success": self.success, "address": self.address}
        for name in ("profile", "streak", "tasks", "exp", "error"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value.__dict__ if isinstance(value, TaskReport) else value
        return result


class AccountPipeline:
    """Runs one wallet through sign-in and the post-auth steps in STEP_DELAYS order"""

    step_fields = {"profile": "profile", "streak": "streak", "tasks": "tasks", "experience": "exp"}

    def __init__(self, ctx, signer=None, auth=None, api=None, step_delays=STEP_DELAYS,
                 sleep=time.sleep, rng=None):
        self.signer = signer or WalletSigner()
        self.auth = auth or AuthProtocol(ctx, self.signer)
        self.api = api or QuestApi(ctx)
        self.step_delays = step_delays
        self.sleep = sleep
        self.rng = rng or random

    def process(self, private_key, index):
        wallet_index = index + 1
        label = f"Wallet {wallet_index} | "
        address = None

        try:
            logger.info(f"{label}Processing account with private key: {mask_key(private_key)}")
            address = self.signer.address_of(private_key)
            logger.info(f"{label}Wallet address: {address}")

            outcome = self.auth.authenticate(private_key, address)
            if not outcome.authenticated:
                logger.error(f"{label}Authentication failed for account {wallet_index}")
                return AccountResult(success=False, address=address, auth_state=outcome.state)
            logger.success(f"{label}Authentication successful!")

            result = AccountResult(success=True, address=address, auth_state=outcome.state)
            for step, delay in self.step_delays:
                self.sleep(delay)
                setattr(result, self.step_fields[step], self._run_step(step, label))
            logger.success(f"{label}Account processed")
            return result

        except Exception as e:
            logger.error(f"{label}Processing failed for account {wallet_index}: {str(e)}")
            logger.debug(traceback.format_exc())
            return AccountResult(success=False, address=address, error=str(e), auth_state=AuthState.FAILED)

    def _run_step(self, step, label):
        try:
            return getattr(self, f"_step_{step}")(label)
        except Exception as e:
            logger.error(f"{label}Step '{step}' failed: {str(e)}")
            return None

    def _step_profile(self, label):
        return self.api.get_profile()

    def _step_streak(self, label):
        return with_retry(
            self.api.update_streak,
            max_attempts=STREAK_MAX_ATTEMPTS,
            delay=STREAK_RETRY_DELAY,
            is_valid=lambda data: parse_streak(data) is not None,
            label=f"{label}Streak update",
            sleep=self.sleep
        )

    def _step_tasks(self, label):
        return run_social_tasks(self.api, label, sleep=self.sleep, rng=self.rng)

    def _step_experience(self, label):
        return self.api.get_experience()


# Cycle scheduling
@dataclass
class CycleSummary:
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    tasks_completed: int = 0
    tasks_already_completed: int = 0
    results: List[AccountResult] = field(default_factory=list)

    @classmethod
    def from_results(cls, results):
        reports = [r.tasks for r in results if r.tasks is not None]
        return cls(
            total=len(results),
            succeeded=sum(1 for r in results if r.success),
            failed=sum(1 for r in results if not r.success),
            tasks_completed=sum(report.completed for report in reports),
            tasks_already_completed=sum(report.already_completed for report in reports),
            results=list(results)
        )


class CycleScheduler:
    """Processes every wallet in the key file once, strictly in order"""

    def __init__(self, ctx, pipeline=None, pk_file=PK_FILE, account_delay=ACCOUNT_DELAY_RANGE,
                 sleep=time.sleep, rng=None):
        self.ctx = ctx
        self.sleep = sleep
        self.rng = rng or random
        self.pipeline = pipeline or AccountPipeline(ctx, sleep=sleep, rng=self.rng)
        self.pk_file = pk_file
        self.account_delay = account_delay

    def run_cycle(self):
        logger.info("=" * 50)
        logger.info("STARTING NEW PROCESSING CYCLE")
        logger.info(f"Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        logger.info("=" * 50)

        self.ctx.cookies.load()
        self.ctx.visit_landing_page()

        private_keys = read_private_keys(self.pk_file)
        logger.info(f"Found {len(private_keys)} private keys in the file")

        results = []
        for i, private_key in enumerate(private_keys):
            logger.info("=" * 50)
            logger.info(f"PROCESSING WALLET {i + 1}/{len(private_keys)}")
            logger.info("=" * 50)
            result = self.pipeline.process(private_key, i)
            logger.debug(f"Wallet {i + 1} | Result: {json.dumps(result.to_dict(), default=str)}")
            results.append(result)

            if i < len(private_keys) - 1:
                delay = self.rng.uniform(*self.account_delay)
                logger.info(f"Waiting {delay:.2f} seconds before next account...")
                self.sleep(delay)

        summary = CycleSummary.from_results(results)
        self.log_summary(summary)
        return summary

    @staticmethod
    def log_summary(summary):
        logger.info("=" * 50)
        logger.info("PROCESSING CYCLE SUMMARY")
        logger.info(f"Total accounts processed: {summary.total}")
        logger.info(f"Successful authentications: {summary.succeeded}")
        logger.info(f"Failed authentications: {summary.failed}")
        logger.info(f"Social tasks completed this cycle: {summary.tasks_completed}")
        logger.info(f"Social tasks already completed: {summary.tasks_already_completed}")
        logger.info("=" * 50)


class RecurringJob:
    """Runs a job, sleeps a fixed interval, and repeats"""

    def __init__(self, job, interval_seconds, sleep=time.sleep):
        self.job = job
        self.interval_seconds = interval_seconds
        self.sleep = sleep

    def run_once(self):
        """Run the job once. A failed run is logged and returns None."""
        try:
            return self.job()
        except Exception as e:
            logger.error(f"Error in processing cycle: {str(e)}")
            logger.debug(traceback.format_exc())
            return None

    def run_forever(self, max_runs=None):
        runs = 0
        while max_runs is None or runs < max_runs:
            self.run_once()
            runs += 1

            next_run = datetime.now() + timedelta(seconds=self.interval_seconds)
            logger.info(f"Completed cycle. Next run scheduled at: {next_run.strftime('%Y-%m-%d %H:%M:%S')}")
            logger.info(f"Waiting {self.interval_seconds / 3600:g} hours before next run...")
            self.sleep(self.interval_seconds)


def main():
    setup_logging(LOG_FILE)
    try:
        logger.info(f"Starting GPU.NET script with {CYCLE_INTERVAL_HOURS:g}-hour loop...")
        ctx = SessionContext(proxy=load_proxy(PROXY_FILE))
        scheduler = CycleScheduler(ctx)
        RecurringJob(scheduler.run_cycle, CYCLE_INTERVAL_HOURS * 3600).run_forever()
    except KeyboardInterrupt:
        logger.warning("Operation cancelled by user.")
    except Exception as e:
        logger.error(f"Fatal error in main process: {str(e)}")
        logger.debug(traceback.format_exc())
        sys.exit(1)


if __name__ == "__main__":
    main()
