"""HTTP client for the Obyte chatbot that manages donor AA accounts"""
import requests
import logging
import config

logger = logging.getLogger(__name__)


class ChatbotClient:
    """Thin wrapper around a requests session pointed at the chatbot"""

    def __init__(self, base_url: str = None):
        self.base_url = (base_url or config.CHATBOT_URL).rstrip("/")
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def post(self, path: str, payload: dict) -> requests.Response:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug(f"POST {url}")
        return self.session.post(url, json=payload)

    def get_donor_balance(self, aa_account: str) -> requests.Response:
        return self.post("aaGetDonorBalance", {"aaAccount": aa_account})


_chatbot_client = None

def get_chatbot_client() -> ChatbotClient:
    global _chatbot_client
    if _chatbot_client is None:
        _chatbot_client = ChatbotClient()
    return _chatbot_client
