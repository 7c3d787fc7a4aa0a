"""
ML prediction and chatbot endpoints

Both services may run on their own hosts (VITE_ML_SERVICE_URL,
VITE_CHATBOT_SERVICE_URL); their HttpClient is built with that base URL.
"""
from typing import Any, Dict, List, Optional

from .base_api import ResourceAPI


class MLAPI(ResourceAPI):
    prefix = "/ml"

    def predict_specialty(
        self,
        symptoms: str,
        age: Optional[int] = None,
        gender: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"symptoms": symptoms}
        if age is not None:
            payload["age"] = age
        if gender:
            payload["gender"] = gender
        return self._post("/predict-specialty", payload)

    def get_specialties(self) -> List[str]:
        return self._get("/specialties")


class ChatbotAPI(ResourceAPI):
    prefix = "/chatbot"

    def send_message(self, message: str, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"message": message}
        if context:
            payload["context"] = context
        return self._post("/chat", payload)

    def get_intents(self) -> Any:
        return self._get("/intents")
