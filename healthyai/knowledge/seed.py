"""Starter entries used when no knowledge base has been saved yet."""

from healthyai.knowledge.models import KnowledgeEntry

BLOOD_PRESSURE = """# Blood Pressure Ranges

Normal blood pressure is considered to be below 120/80 mmHg.

## Categories:
- **Normal**: Less than 120/80 mmHg
- **Elevated**: 120-129/<80 mmHg
- **Stage 1 Hypertension**: 130-139/80-89 mmHg
- **Stage 2 Hypertension**: 140+/90+ mmHg
- **Hypertensive Crisis**: 180+/120+ mmHg (requires immediate medical attention)

Blood pressure should be measured regularly, especially for those with a family \
history of hypertension or heart disease."""

BMI = """# Body Mass Index (BMI) Categories

BMI is calculated as weight (kg) divided by height squared (m²).

## Categories:
- **Underweight**: BMI less than 18.5
- **Normal weight**: BMI 18.5 to 24.9
- **Overweight**: BMI 25 to 29.9
- **Obesity Class I**: BMI 30 to 34.9
- **Obesity Class II**: BMI 35 to 39.9
- **Obesity Class III**: BMI 40 or higher

BMI is a screening tool and not diagnostic of body fatness or health."""

WATER = """# Daily Water Intake Recommendations

## General Guidelines:
- **Adult men**: About 15.5 cups (3.7 liters) of fluids per day
- **Adult women**: About 11.5 cups (2.7 liters) of fluids per day

## Factors that influence water needs:
- Exercise
- Environment (hot or humid weather)
- Illness or health conditions
- Pregnancy or breastfeeding

About 20% of daily fluid intake typically comes from food, with the rest from drinks."""


def default_entries() -> list[KnowledgeEntry]:
    return [
        KnowledgeEntry(
            id="1",
            title="Blood Pressure Ranges",
            content=BLOOD_PRESSURE,
            category="cardiovascular",
            sources="American Heart Association, 2022",
        ),
        KnowledgeEntry(
            id="2",
            title="Healthy BMI Range",
            content=BMI,
            category="weight",
            sources="Centers for Disease Control and Prevention, 2023",
        ),
        KnowledgeEntry(
            id="3",
            title="Recommended Daily Water Intake",
            content=WATER,
            category="hydration",
            sources="Mayo Clinic, U.S. National Academies of Sciences, Engineering, and Medicine",
        ),
    ]
