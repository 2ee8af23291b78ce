import os
import logging
import requests

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://open.bigmodel.cn/api/paas/v4/chat/completions"


class ProviderError(Exception):
    pass


class ZhipuProvider:

    # Zhipu GLM chat-completions (OpenAI 호환 형식)
    def __init__(self, api_key: str, model: str = "glm-4", endpoint: str = None):
        self.api_key = api_key
        self.model = model or "glm-4"
        self.endpoint = endpoint or os.getenv("ZHIPU_API_ENDPOINT", DEFAULT_ENDPOINT)

    def complete(self, prompt: str) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "messages": [
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.7,
            "max_tokens": 2000,
        }

        logger.info(f"Calling Zhipu model {self.model}")
        response = requests.post(self.endpoint, headers=headers, json=body)

        if response.status_code != 200:
            raise ProviderError(f"Zhipu API error: {response.status_code} - {response.text}")

        data = response.json()
        choices = data.get("choices") or [{}]
        return (choices[0].get("message") or {}).get("content") or ""
