"""
Script to load a sample student into GradePilot via the REST API.
Make sure the server is running before executing this script.

Usage:
    python add_data.py [student_id]
"""

import os
import sys

import requests


def _console_supports_utf8() -> bool:
    enc = getattr(sys.stdout, "encoding", None)
    return enc is not None and "utf" in enc.lower()


_OK_CHAR = "✓" if _console_supports_utf8() else "[OK]"
_FAIL_CHAR = "✗" if _console_supports_utf8() else "[FAIL]"
_INFO_CHAR = "ℹ" if _console_supports_utf8() else "[INFO]"


def _detect_base_url() -> str:
    """Determine a reachable BASE_URL.

    Priority: environment variable `GRADEPILOT_BASE_URL`, then common local ports.
    If nothing responds, fall back to http://127.0.0.1:8000.
    """
    env = os.environ.get("GRADEPILOT_BASE_URL")
    if env:
        return env

    candidates = [
        "http://127.0.0.1:8000",
        "http://localhost:8000",
        "http://127.0.0.1:8888",
    ]

    for c in candidates:
        try:
            resp = requests.get(f"{c}/health", timeout=0.5)
            if resp.status_code == 200:
                return c
        except requests.exceptions.RequestException:
            continue

    return candidates[0]


BASE_URL = _detect_base_url()


SAMPLE_CLASSES = [
    {
        "id": "calc-1",
        "name": "Calculus I",
        "credit_hours": 4,
        "is_completed": False,
        "term": "2026-fall",
        "categories": [
            {"id": "calc-hw", "name": "Homework", "weight": 30, "color": "#3b82f6"},
            {"id": "calc-exams", "name": "Exams", "weight": 50, "color": "#ef4444"},
            {"id": "calc-final", "name": "Final Exam", "weight": 20, "color": "#a855f7"},
        ],
        "assignments": [
            {"id": "calc-hw1", "name": "Problem Set 1", "category_id": "calc-hw", "points_possible": 20, "points_earned": 19},
            {"id": "calc-hw2", "name": "Problem Set 2", "category_id": "calc-hw", "points_possible": 20, "points_earned": 16},
            {"id": "calc-mid", "name": "Midterm", "category_id": "calc-exams", "points_possible": 100, "points_earned": 82},
            {"id": "calc-fin", "name": "Final", "category_id": "calc-final", "points_possible": 150},
        ],
    },
    {
        "id": "hist-101",
        "name": "World History",
        "credit_hours": 3,
        "is_completed": False,
        "term": "2026-fall",
        "categories": [
            {"id": "hist-essays", "name": "Essays", "weight": 60},
            {"id": "hist-quiz", "name": "Quizzes", "weight": 40},
        ],
        "assignments": [
            {"id": "hist-e1", "name": "Essay 1", "category_id": "hist-essays", "points_possible": 50, "points_earned": 46},
            {"id": "hist-q1", "name": "Quiz 1", "category_id": "hist-quiz", "points_possible": 10, "points_earned": 8},
        ],
    },
    {
        "id": "cs-100",
        "name": "Intro to Programming",
        "credit_hours": 3,
        "is_completed": True,
        "term": "2026-spring",
        "categories": [
            {"id": "cs-labs", "name": "Labs", "weight": 100},
        ],
        "assignments": [
            {"id": "cs-lab1", "name": "Lab 1", "category_id": "cs-labs", "points_possible": 10, "points_earned": 10},
            {"id": "cs-lab2", "name": "Lab 2", "category_id": "cs-labs", "points_possible": 10, "points_earned": 9},
        ],
    },
]


def check_server():
    """Check if the server is running."""
    try:
        response = requests.get(f"{BASE_URL}/health", timeout=2)
        if response.status_code == 200:
            print(f"{_OK_CHAR} Server is running")
            return True
    except requests.exceptions.RequestException:
        pass
    print(f"{_FAIL_CHAR} Server is not running!")
    print("\nPlease start the server first:")
    print("  python -m gradepilot.main --rest-port 8000")
    return False


def create_class(student_id, class_data):
    """Store a class tree for a student."""
    url = f"{BASE_URL}/students/{student_id}/classes"
    try:
        response = requests.post(url, json=class_data)
        if response.status_code == 201:
            grade = response.json()
            shown = grade.get('current_grade')
            shown = f"{shown}% {grade.get('letter_grade')}" if shown is not None else "no grades yet"
            print(f"{_OK_CHAR} Created class: {class_data['name']} ({shown})")
            return grade
        else:
            print(f"{_FAIL_CHAR} Failed to create class: {response.text}")
            return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error creating class: {e}")
        return None


def show_gpa(student_id):
    """Print the student's GPA summary."""
    url = f"{BASE_URL}/students/{student_id}/gpa"
    try:
        response = requests.get(url)
        if response.status_code == 200:
            gpa = response.json()
            print(f"\n{'='*60}")
            print(f"GPA {gpa['current_gpa']} | Semester {gpa['semester_gpa']} | {gpa['total_credit_hours']} credit hours")
            print(f"{'='*60}")
            for grade in gpa['class_grades']:
                print(f"  {grade['class_name']:25} | {grade['current_grade']:6}% | {grade['letter_grade']:3} | {grade['credit_hours']} cr")
            return gpa
        else:
            print(f"{_FAIL_CHAR} Failed to get GPA: {response.text}")
            return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error getting GPA: {e}")
        return None


def run_what_if(student_id, assignment_id, new_grade):
    """Preview the GPA with one hypothetical grade."""
    url = f"{BASE_URL}/students/{student_id}/what-if"
    data = {"changes": [{"assignment_id": assignment_id, "new_grade": new_grade}]}
    try:
        response = requests.post(url, json=data)
        if response.status_code == 200:
            scenario = response.json()
            sign = "+" if scenario['gpa_change'] >= 0 else ""
            print(f"{_INFO_CHAR} What if {assignment_id} = {new_grade}%: "
                  f"GPA {scenario['resulting_gpa']} ({sign}{scenario['gpa_change']})")
            return scenario
        else:
            print(f"{_FAIL_CHAR} What-if failed: {response.text}")
            return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error running what-if: {e}")
        return None


def main():
    student_id = sys.argv[1] if len(sys.argv) > 1 else "demo-student"
    if not check_server():
        sys.exit(1)

    for class_data in SAMPLE_CLASSES:
        create_class(student_id, class_data)

    show_gpa(student_id)
    run_what_if(student_id, "calc-fin", 95)
    run_what_if(student_id, "calc-fin", 60)


if __name__ == "__main__":
    main()
