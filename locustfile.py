from locust import HttpUser, task, between
import random

HEADLINES = [
    "Scientists confirm the moon is made of cheese!!!",
    "City council approves new budget for road repairs",
    "SHOCKING: doctors hate this one weird trick",
    "Central bank holds interest rates steady",
]
SAMPLE_IMAGE_URL = "https://example.com/storage/v1/object/public/verification-images/sample.jpg"


class TruthGuardUser(HttpUser):
    # Wait time between tasks to simulate real users
    wait_time = between(1, 3)  # seconds

    @task(3)
    def analyze_text(self):
        """Submit a headline for text-only analysis."""
        self.client.post(
            "/analyze-content",
            json={"text": random.choice(HEADLINES), "imageUrl": None},
            name="Analyze Text",
        )

    @task(1)
    def analyze_text_and_image(self):
        self.client.post(
            "/analyze-content",
            json={"text": random.choice(HEADLINES), "imageUrl": SAMPLE_IMAGE_URL},
            name="Analyze Text + Image",
        )

    @task(1)
    def health(self):
        self.client.get("/health", name="Health")
