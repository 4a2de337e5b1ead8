import uuid

from locust import HttpUser, task, constant

PROFILE = {
    "age": 30,
    "gender": "male",
    "weight": 80,
    "height": 180,
    "activity_level": "moderate",
    "goal": "maintain",
}


class CalorieUser(HttpUser):
    wait_time = constant(0)

    def on_start(self):
        email = f"load-{uuid.uuid4().hex[:12]}@example.com"
        self.client.post(
            "/auth/register",
            json={"email": email, "username": email.split("@")[0], "password": "loadtest"},
        )
        resp = self.client.post("/auth/login", data={"username": email, "password": "loadtest"})
        self.headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}

    @task
    def health(self):
        with self.client.get("/health", catch_response=True) as r:
            if r.status_code != 200:
                r.failure("Healthcheck failed")

    @task(3)
    def calculate(self):
        with self.client.post("/calories/calculate", json=PROFILE, headers=self.headers, catch_response=True) as r:
            if r.status_code != 201:
                r.failure(f"Calculation failed: {r.status_code}")

    @task(2)
    def history(self):
        self.client.get("/calories/history", headers=self.headers)
