"""
Russian language configuration.
"""
from lexitrack.languages.types import (
    LanguageConfig, Morphology, MorphologicalPattern as P,
    TeachingStrategies, TeachingStrategy, GrammarExamples, CorrectExample, IncorrectExample,
)


russian_config = LanguageConfig(
    code='ru',
    name='Russian',
    native_name='Русский',
    script='Cyrillic',
    morphology=Morphology(
        verbs=[
            # Present tense
            P(pattern=r'(ю|у)$', features={'person': '1', 'number': 'sing', 'tense': 'pres'}),
            P(pattern=r'(ешь|ишь)$', features={'person': '2', 'number': 'sing', 'tense': 'pres'}),
            P(pattern=r'(ет|ит)$', features={'person': '3', 'number': 'sing', 'tense': 'pres'}),
            P(pattern=r'(ем|им)$', features={'person': '1', 'number': 'plur', 'tense': 'pres'}),
            P(pattern=r'(ете|ите)$', features={'person': '2', 'number': 'plur', 'tense': 'pres'}),
            P(pattern=r'(ют|ат|ят)$', features={'person': '3', 'number': 'plur', 'tense': 'pres'}),
            # Past tense
            P(pattern=r'л$', features={'tense': 'past', 'gender': 'masc'}),
            P(pattern=r'ла$', features={'tense': 'past', 'gender': 'fem'}),
            P(pattern=r'ло$', features={'tense': 'past', 'gender': 'neut'}),
            P(pattern=r'ли$', features={'tense': 'past', 'number': 'plur'}),
        ],
        nouns=[
            # Plural
            P(pattern=r'(ы|и)$', features={'number': 'plur', 'case': 'nom'}),
            P(pattern=r'(ов|ев|ей)$', features={'number': 'plur', 'case': 'gen'}),
            P(pattern=r'(ам|ям)$', features={'number': 'plur', 'case': 'dat'}),
            P(pattern=r'(ами|ями)$', features={'number': 'plur', 'case': 'ins'}),
            P(pattern=r'(ах|ях)$', features={'number': 'plur', 'case': 'loc'}),
            # Singular
            P(pattern=r'(у|ю)$', features={'number': 'sing', 'case': 'acc'}),
            P(pattern=r'(ом|ем)$', features={'number': 'sing', 'case': 'ins'}),
            P(pattern=r'е$', features={'number': 'sing', 'case': 'loc'}),
        ],
        adjectives=[
            P(pattern=r'ая$', features={'gender': 'fem', 'number': 'sing', 'case': 'nom'}),
            P(pattern=r'(ую|юю)$', features={'gender': 'fem', 'number': 'sing', 'case': 'acc'}),
            P(pattern=r'(ое|ее)$', features={'gender': 'neut', 'number': 'sing', 'case': 'nom'}),
            P(pattern=r'(ые|ие)$', features={'number': 'plur', 'case': 'nom'}),
        ],
    ),
    teaching_strategies=TeachingStrategies(
        beginner=TeachingStrategy(
            description="Use mostly English with key Russian phrases",
            focus_areas=[
                "Basic vocabulary with Cyrillic and romanization",
                "High-frequency words and basic Cyrillic letters",
                "Simple greetings and everyday phrases",
                "Numbers and basic expressions",
            ],
            mix_ratio="80% English, 20% Russian",
        ),
        intermediate=TeachingStrategy(
            description="Increase Russian usage gradually",
            focus_areas=[
                "Verb conjugations (present, past, future)",
                "Basic noun cases (nominative, accusative, genitive)",
                "Adjective-noun agreement",
                "Simple verb aspects (perfective vs imperfective)",
            ],
            mix_ratio="50% English, 50% Russian",
        ),
        advanced=TeachingStrategy(
            description="Primarily Russian conversation",
            focus_areas=[
                "All six cases with their functions",
                "Complex verb aspects and motion verbs",
                "Participles and gerunds",
                "Subjunctive mood and conditionals",
                "Literary and formal register",
            ],
            mix_ratio="20% English, 80% Russian",
        ),
    ),
    grammar_examples=GrammarExamples(
        correct=[
            CorrectExample(
                text="Моя собака очень большая, но мой кот маленький",
                translation="My dog is very big, but my cat is small",
                explanation="Correct gender agreement between adjectives and nouns",
            ),
            CorrectExample(
                text="Я читаю книгу",
                translation="I am reading a book",
                explanation="Correct 1st person singular present tense and accusative case",
            ),
        ],
        incorrect=[
            IncorrectExample(
                text="Я читаю книга",
                error="Wrong case for direct object",
                correction="Я читаю книгу",
                explanation="Direct objects of transitive verbs take accusative case",
            ),
            IncorrectExample(
                text="Ты читает газету",
                error="Wrong verb conjugation",
                correction="Ты читаешь газету",
                explanation="2nd person singular should use 'читаешь' not 'читает'",
            ),
        ],
    ),
)
