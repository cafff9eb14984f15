from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from assessment.models import AttemptAnswer, Difficulty, ExamAttempt

from .helpers import add_rule, create_category, create_choice, create_essay, create_exam, create_true_false, create_user

# Routen aus backend/urls kombiniert mit assessment/urls
BASE_URL = "/api/assessment"


class AssessmentApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.student = create_user("student")
        cls.grader = create_user("grader", is_staff=True)
        cls.category = create_category("Python")
        cls.tf = create_true_false(cls.category, Difficulty.EASY, correct=True)
        cls.single = create_choice(cls.category, correct_keys=("B",), difficulty=Difficulty.MEDIUM)
        cls.essay = create_essay(cls.category, Difficulty.HARD, points=Decimal("4.00"))
        cls.exam = create_exam(title="API Prüfung", show_results_immediately=True)
        add_rule(cls.exam, cls.category, easy_count=1, medium_count=1, hard_count=1)

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.student)

    def start(self):
        return self.client.post(f"{BASE_URL}/exams/{self.exam.id}/start/", format="json")

    def test_requires_authentication(self):
        client = APIClient()
        response = client.post(f"{BASE_URL}/exams/{self.exam.id}/start/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_token_cookie_authenticates(self):
        client = APIClient()
        response = client.post(
            f"{BASE_URL}/token/",
            {"username": "student", "password": "Musterpassword"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn("access", response.json())
        self.assertIn("access_token", response.cookies)

        listed = client.get(f"{BASE_URL}/attempts/")
        self.assertEqual(listed.status_code, status.HTTP_200_OK)

    def test_available_exams(self):
        create_exam(title="Entwurf", is_published=False)

        response = self.client.get(f"{BASE_URL}/exams/available/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([exam["title"] for exam in response.json()], ["API Prüfung"])

    def test_start_and_resume(self):
        response = self.start()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(len(body["data"]["questions"]), 3)
        self.assertFalse(body["data"]["resumed"])
        self.assertTrue(all("correctness" not in q for q in body["data"]["questions"]))

        resumed = self.start()
        self.assertEqual(resumed.status_code, status.HTTP_200_OK)
        self.assertTrue(resumed.json()["data"]["resumed"])
        self.assertEqual(resumed.json()["data"]["attempt"]["id"], body["data"]["attempt"]["id"])

    def test_unknown_exam(self):
        response = self.client.post(f"{BASE_URL}/exams/999999/start/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unpublished_exam_error_format(self):
        exam = create_exam(title="Entwurf", is_published=False)

        response = self.client.post(f"{BASE_URL}/exams/{exam.id}/start/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error"]["kind"], "NotPublished")
        self.assertEqual(body["error"]["details"]["exam_id"], exam.id)

    def test_insufficient_questions_is_conflict(self):
        exam = create_exam(title="Zu groß")
        add_rule(exam, self.category, easy_count=3)

        response = self.client.post(f"{BASE_URL}/exams/{exam.id}/start/")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"]["kind"], "InsufficientQuestions")
        self.assertEqual(response.json()["error"]["details"]["requested"], 3)

    def test_save_submit_and_result(self):
        attempt_id = self.start().json()["data"]["attempt"]["id"]

        saved = self.client.put(
            f"{BASE_URL}/attempts/{attempt_id}/answers/",
            {"question_id": self.single.id, "payload": {"selected": ["B"]}},
            format="json",
        )
        self.assertEqual(saved.status_code, status.HTTP_200_OK)

        detail = self.client.get(f"{BASE_URL}/attempts/{attempt_id}/")
        self.assertEqual(
            detail.json()["data"]["answers"],
            [{"question_id": self.single.id, "payload": {"selected": ["B"]}}],
        )

        submitted = self.client.post(
            f"{BASE_URL}/attempts/{attempt_id}/submit/",
            {
                "answers": [
                    {"question_id": self.tf.id, "payload": True},
                    {"question_id": self.essay.id, "payload": "Meine Antwort"},
                ]
            },
            format="json",
        )
        self.assertEqual(submitted.status_code, status.HTTP_200_OK)
        data = submitted.json()["data"]
        self.assertFalse(data["auto_graded"])
        self.assertEqual(data["attempt"]["status"], ExamAttempt.Status.SUBMITTED)

        result = self.client.get(f"{BASE_URL}/attempts/{attempt_id}/result/")
        self.assertEqual(result.status_code, status.HTTP_200_OK)
        self.assertEqual(result.json()["data"]["summary"]["earned_score"], "2.00")

        again = self.client.post(f"{BASE_URL}/attempts/{attempt_id}/submit/", {}, format="json")
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.json()["error"]["kind"], "InvalidState")

    def test_save_unknown_question(self):
        attempt_id = self.start().json()["data"]["attempt"]["id"]

        response = self.client.put(
            f"{BASE_URL}/attempts/{attempt_id}/answers/",
            {"question_id": 999999, "payload": True},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["error"]["kind"], "AnswerNotFound")

    def test_attempts_of_other_users_are_hidden(self):
        attempt_id = self.start().json()["data"]["attempt"]["id"]
        self.client.force_authenticate(user=create_user("fremd"))

        response = self.client.get(f"{BASE_URL}/attempts/{attempt_id}/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["error"]["kind"], "AttemptNotFound")

    def test_attempt_list(self):
        self.start()

        response = self.client.get(f"{BASE_URL}/attempts/", {"exam_id": self.exam.id, "limit": 5})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["meta"]["total"], 1)
        self.assertEqual(response.json()["data"][0]["exam_title"], "API Prüfung")

    def test_invalid_query_parameters(self):
        response = self.client.get(f"{BASE_URL}/attempts/", {"page": "abc"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class GradingApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.student = create_user("student")
        cls.grader = create_user("grader", is_staff=True)
        cls.category = create_category("Aufsätze")
        cls.essay = create_essay(cls.category, Difficulty.HARD, points=Decimal("10.00"))
        cls.exam = create_exam(title="Aufsatzprüfung")
        add_rule(cls.exam, cls.category, hard_count=1)

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.student)
        attempt_id = self.client.post(f"{BASE_URL}/exams/{self.exam.id}/start/").json()["data"]["attempt"]["id"]
        self.client.post(
            f"{BASE_URL}/attempts/{attempt_id}/submit/",
            {"answers": [{"question_id": self.essay.id, "payload": "Ein Aufsatz"}]},
            format="json",
        )
        self.attempt_id = attempt_id
        self.answer = AttemptAnswer.objects.get(attempt_id=attempt_id)

    def test_grading_requires_staff(self):
        response = self.client.get(f"{BASE_URL}/grading/pending/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_pending_queue_and_grading(self):
        self.client.force_authenticate(user=self.grader)

        pending = self.client.get(f"{BASE_URL}/grading/pending/", {"exam_id": self.exam.id})
        self.assertEqual(pending.status_code, status.HTTP_200_OK)
        items = pending.json()["data"]
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]["id"], self.answer.pk)
        self.assertEqual(items[0]["test_taker"], "student")
        self.assertEqual(items[0]["question"]["answer_key"], "Musterlösung")

        graded = self.client.post(
            f"{BASE_URL}/grading/answers/{self.answer.pk}/",
            {"score": "7.50", "feedback": "Solide"},
            format="json",
        )
        self.assertEqual(graded.status_code, status.HTTP_200_OK)
        self.assertEqual(graded.json()["data"]["attempt"]["status"], ExamAttempt.Status.GRADED)
        self.assertEqual(graded.json()["data"]["score"], "7.50")

        result = self.client.get(f"{BASE_URL}/grading/attempts/{self.attempt_id}/result/")
        self.assertEqual(result.status_code, status.HTTP_200_OK)
        self.assertEqual(result.json()["data"]["per_question"][0]["feedback"], "Solide")

    def test_out_of_range_score(self):
        self.client.force_authenticate(user=self.grader)

        response = self.client.post(
            f"{BASE_URL}/grading/answers/{self.answer.pk}/",
            {"score": "10.50"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error"]["kind"], "OutOfRange")

    def test_student_result_hidden_until_graded(self):
        response = self.client.get(f"{BASE_URL}/attempts/{self.attempt_id}/result/")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
