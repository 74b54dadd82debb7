"""Static demo dataset served when neither the backend nor the cache can answer."""

import copy

MOCK_USER = {
    "user_id": 1,
    "email": "usuario@ejemplo.com",
    "first_name": "Juan",
    "last_name": "Pérez",
    "username": "juanperez",
    "created_at": "2025-04-01T10:00:00Z",
}

MOCK_PROFILE = {
    "profile_id": 1,
    "user_id": 1,
    "age": 30,
    "gender": "male",
    "height": 175,
    "weight": 75,
    "activity_level": "moderate",
    "fitness_level": "intermediate",
    "fitness_goals": ["weight_loss", "muscle_tone"],
    "created_at": "2025-04-01T10:00:00Z",
    "updated_at": "2025-04-01T10:00:00Z",
}

MOCK_GOALS = [
    {
        "goal_id": 1,
        "user_id": 1,
        "goal_type": "weight_loss",
        "target_value": 70,
        "start_date": "2025-04-01",
        "target_date": "2025-06-01",
        "status": "active",
    },
    {
        "goal_id": 2,
        "user_id": 1,
        "goal_type": "muscle_gain",
        "target_value": 5,
        "start_date": "2025-04-01",
        "target_date": "2025-07-01",
        "status": "active",
    },
]

MOCK_PROGRESS = [
    {
        "progress_id": 1,
        "user_id": 1,
        "tracking_date": "2025-04-01",
        "weight": 75,
        "body_fat_percentage": 18,
        "notes": "Starting point",
        "created_at": "2025-04-01T10:00:00Z",
    },
    {
        "progress_id": 2,
        "user_id": 1,
        "tracking_date": "2025-04-08",
        "weight": 74.2,
        "body_fat_percentage": 17.5,
        "notes": "Good progress this week",
        "created_at": "2025-04-08T10:00:00Z",
    },
    {
        "progress_id": 3,
        "user_id": 1,
        "tracking_date": "2025-04-15",
        "weight": 73.5,
        "body_fat_percentage": 17.2,
        "notes": "Consistent progress",
        "created_at": "2025-04-15T10:00:00Z",
    },
]

MOCK_EXERCISES = [
    {
        "exercise_id": 1,
        "name": "Carrera en cinta",
        "description": "Correr a ritmo moderado en cinta.",
        "muscle_group": "Cardio",
        "equipment_needed": "Cinta de correr",
        "difficulty_level": "intermediate",
    },
    {
        "exercise_id": 2,
        "name": "Plancha",
        "description": "Mantener el cuerpo recto apoyado en antebrazos y puntas de los pies.",
        "muscle_group": "Core",
        "equipment_needed": "Ninguno",
        "difficulty_level": "beginner",
    },
    {
        "exercise_id": 3,
        "name": "Sentadilla con barra",
        "description": "Sentadilla trasera con barra olímpica.",
        "muscle_group": "Piernas",
        "equipment_needed": "Barra",
        "difficulty_level": "intermediate",
    },
    {
        "exercise_id": 4,
        "name": "Press de banca",
        "description": "Press horizontal con barra en banco plano.",
        "muscle_group": "Pecho",
        "equipment_needed": "Barra, banco",
        "difficulty_level": "intermediate",
    },
    {
        "exercise_id": 5,
        "name": "Dominadas",
        "description": "Tracción vertical con agarre prono.",
        "muscle_group": "Espalda",
        "equipment_needed": "Barra de dominadas",
        "difficulty_level": "advanced",
    },
]

MOCK_WORKOUT_PLANS = [
    {
        "plan_id": 1,
        "user_id": 1,
        "plan_name": "Plan de Pérdida de Peso",
        "description": "Un plan de entrenamiento diseñado para ayudarte a perder peso de manera saludable.",
        "is_ai_generated": True,
        "created_at": "2025-04-01T10:00:00Z",
        "updated_at": "2025-04-01T10:00:00Z",
        "sessions": [
            {
                "session_id": 1,
                "day_of_week": "Monday",
                "focus_area": "Cardio y Core",
                "duration_minutes": 45,
                "exercises": [
                    {
                        "exercise_id": 1,
                        "name": "Carrera en cinta",
                        "sets": 1,
                        "reps": None,
                        "duration_seconds": 1200,
                        "rest_seconds": 60,
                        "notes": "Mantén un ritmo constante",
                    },
                    {
                        "exercise_id": 2,
                        "name": "Plancha",
                        "sets": 3,
                        "reps": None,
                        "duration_seconds": 45,
                        "rest_seconds": 30,
                        "notes": "",
                    },
                ],
                "completions": [],
            },
        ],
    },
    {
        "plan_id": 2,
        "user_id": 1,
        "plan_name": "Plan de Ganancia Muscular",
        "description": "Un plan de entrenamiento diseñado para ayudarte a ganar masa muscular.",
        "is_ai_generated": True,
        "created_at": "2025-04-02T10:00:00Z",
        "updated_at": "2025-04-02T10:00:00Z",
        "sessions": [
            {
                "session_id": 2,
                "day_of_week": "Lunes",
                "focus_area": "Tren inferior",
                "duration_minutes": 60,
                "exercises": [
                    {
                        "exercise_id": 3,
                        "name": "Sentadilla con barra",
                        "sets": 4,
                        "reps": 8,
                        "rest_seconds": 120,
                        "notes": "",
                    },
                ],
                "completions": [],
            },
            {
                "session_id": 3,
                "day_of_week": "Miércoles",
                "focus_area": "Tren superior",
                "duration_minutes": 60,
                "exercises": [
                    {
                        "exercise_id": 4,
                        "name": "Press de banca",
                        "sets": 4,
                        "reps": 8,
                        "rest_seconds": 120,
                        "notes": "",
                    },
                    {
                        "exercise_id": 5,
                        "name": "Dominadas",
                        "sets": 3,
                        "reps": 6,
                        "rest_seconds": 90,
                        "notes": "Asistidas si es necesario",
                    },
                ],
                "completions": [],
            },
        ],
    },
]

MOCK_WORKOUT_LOGS = [
    {
        "log_id": 1,
        "user_id": 1,
        "session_id": 1,
        "workout_date": "2025-04-07",
        "duration_minutes": 45,
        "notes": "Buena sesión",
    },
]

MOCK_NUTRITION_PLANS = [
    {
        "nutrition_plan_id": 1,
        "user_id": 1,
        "plan_name": "Plan de Déficit Calórico",
        "daily_calories": 2000,
        "protein_grams": 150,
        "carbs_grams": 200,
        "fat_grams": 67,
        "created_at": "2025-04-01T10:00:00Z",
        "updated_at": "2025-04-01T10:00:00Z",
        "meals": [
            {
                "meal_id": 1,
                "meal_name": "Desayuno",
                "meal_time": "08:00",
                "calories": 500,
                "protein_grams": 35,
                "carbs_grams": 55,
                "fat_grams": 15,
                "foods": [
                    {"name": "Avena", "quantity": "80 g", "calories": 300},
                    {"name": "Claras de huevo", "quantity": "200 g", "calories": 100},
                    {"name": "Plátano", "quantity": "1 unidad", "calories": 100},
                ],
                "completions": [],
            },
            {
                "meal_id": 2,
                "meal_name": "Almuerzo",
                "meal_time": "14:00",
                "calories": 700,
                "protein_grams": 55,
                "carbs_grams": 70,
                "fat_grams": 20,
                "foods": [
                    {"name": "Pechuga de pollo", "quantity": "200 g", "calories": 330},
                    {"name": "Arroz integral", "quantity": "150 g", "calories": 250},
                    {"name": "Verduras", "quantity": "200 g", "calories": 120},
                ],
                "completions": [],
            },
        ],
    },
]


def get_mock(name: str):
    """Return a deep copy of a dataset so callers can't mutate the originals."""
    return copy.deepcopy(globals()[name])
