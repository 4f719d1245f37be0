"""
Spanish language configuration.
"""
from lexitrack.languages.types import (
    LanguageConfig, Morphology, MorphologicalPattern as P,
    TeachingStrategies, TeachingStrategy, GrammarExamples, CorrectExample, IncorrectExample,
)


spanish_config = LanguageConfig(
    code='es',
    name='Spanish',
    native_name='Español',
    script='Latin',
    morphology=Morphology(
        verbs=[
            # Present tense -ar verbs
            P(pattern=r'o$', features={'person': '1', 'number': 'sing', 'tense': 'pres'}),
            P(pattern=r'as$', features={'person': '2', 'number': 'sing', 'tense': 'pres'}),
            P(pattern=r'a$', features={'person': '3', 'number': 'sing', 'tense': 'pres'}),
            P(pattern=r'amos$', features={'person': '1', 'number': 'plur', 'tense': 'pres'}),
            P(pattern=r'áis$', features={'person': '2', 'number': 'plur', 'tense': 'pres'}),
            P(pattern=r'an$', features={'person': '3', 'number': 'plur', 'tense': 'pres'}),
            # Present tense -er/-ir verbs
            P(pattern=r'es$', features={'person': '2', 'number': 'sing', 'tense': 'pres'}),
            P(pattern=r'e$', features={'person': '3', 'number': 'sing', 'tense': 'pres'}),
            P(pattern=r'(emos|imos)$', features={'person': '1', 'number': 'plur', 'tense': 'pres'}),
            P(pattern=r'(éis|ís)$', features={'person': '2', 'number': 'plur', 'tense': 'pres'}),
            P(pattern=r'en$', features={'person': '3', 'number': 'plur', 'tense': 'pres'}),
            # Preterite
            P(pattern=r'é$', features={'person': '1', 'number': 'sing', 'tense': 'pret'}),
            P(pattern=r'aste$', features={'person': '2', 'number': 'sing', 'tense': 'pret'}),
            P(pattern=r'ó$', features={'person': '3', 'number': 'sing', 'tense': 'pret'}),
        ],
        nouns=[
            P(pattern=r's$', features={'number': 'plur'}),
            P(pattern=r'es$', features={'number': 'plur'}),
            P(pattern=r'a$', features={'gender': 'fem', 'number': 'sing'}),
            P(pattern=r'o$', features={'gender': 'masc', 'number': 'sing'}),
        ],
        adjectives=[
            P(pattern=r'a$', features={'gender': 'fem', 'number': 'sing'}),
            P(pattern=r'o$', features={'gender': 'masc', 'number': 'sing'}),
            P(pattern=r'as$', features={'gender': 'fem', 'number': 'plur'}),
            P(pattern=r'os$', features={'gender': 'masc', 'number': 'plur'}),
        ],
    ),
    teaching_strategies=TeachingStrategies(
        beginner=TeachingStrategy(
            description="Use mostly English with key Spanish phrases",
            focus_areas=[
                "Basic vocabulary with pronunciation guides",
                "High-frequency words and cognates",
                "Simple greetings and everyday phrases",
                "Basic pronunciation and accent marks",
            ],
            mix_ratio="80% English, 20% Spanish",
        ),
        intermediate=TeachingStrategy(
            description="Increase Spanish usage gradually",
            focus_areas=[
                "Verb conjugations (present, preterite, imperfect)",
                "Noun-adjective agreement",
                "Ser vs estar usage",
                "Basic subjunctive mood",
            ],
            mix_ratio="50% English, 50% Spanish",
        ),
        advanced=TeachingStrategy(
            description="Primarily Spanish conversation",
            focus_areas=[
                "Complex verb tenses and moods",
                "Subjunctive in various contexts",
                "Idiomatic expressions",
                "Regional variations and formal register",
            ],
            mix_ratio="20% English, 80% Spanish",
        ),
    ),
    grammar_examples=GrammarExamples(
        correct=[
            CorrectExample(
                text="La casa blanca es muy grande",
                translation="The white house is very big",
                explanation="Correct noun-adjective agreement in gender and number",
            ),
            CorrectExample(
                text="Yo hablo español todos los días",
                translation="I speak Spanish every day",
                explanation="Correct 1st person singular present tense",
            ),
        ],
        incorrect=[
            IncorrectExample(
                text="El casa blanco",
                error="Wrong gender agreement",
                correction="La casa blanca",
                explanation="Casa is feminine, so articles and adjectives must agree",
            ),
            IncorrectExample(
                text="Yo hablas español",
                error="Wrong verb conjugation",
                correction="Yo hablo español",
                explanation="1st person singular should use 'hablo' not 'hablas'",
            ),
        ],
    ),
)
