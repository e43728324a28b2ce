"""Static word and sentence banks used by the procedural generators."""

# Sentence completion: (difficulty band 1-10, [before, after], options, answer)
LANGUAGE_QUESTIONS = [
    (1, ["She went ", " the store."], ["to", "too"], "to"),
    (1, ["The cat is ", " here."], ["their", "there"], "there"),
    (1, ["The ", " shines brightly."], ["son", "sun"], "sun"),
    (2, ["This is ", " book."], ["their", "there"], "their"),
    (2, ["It's ", " late."], ["to", "too"], "too"),
    (2, ["He ", " the ball."], ["threw", "through"], "threw"),
    (3, ["The ", " was delicious."], ["flower", "flour"], "flour"),
    (3, ["I can't ", " this anymore."], ["bare", "bear"], "bear"),
    (3, ["We walked ", " the park."], ["threw", "through"], "through"),
    (4, ["", " going to be late."], ["They're", "Their", "There"], "They're"),
    (4, ["The dog wagged ", " tail."], ["its", "it's"], "its"),
    (4, ["Please be ", " when you speak."], ["quite", "quiet"], "quiet"),
    (5, ["Her advice had a big ", " on me."], ["affect", "effect"], "effect"),
    (5, ["I would rather walk ", " drive."], ["than", "then"], "than"),
    (5, ["Don't ", " your keys again."], ["loose", "lose"], "lose"),
    (6, ["The ", " of the school gave a speech."], ["principle", "principal"], "principal"),
    (6, ["She ", " the invitation gladly."], ["accepted", "excepted"], "accepted"),
    (6, ["The weather will ", " our plans."], ["effect", "affect"], "affect"),
    (7, ["Please ", " the letter to the manager."], ["complement", "compliment", "supplement"], "supplement"),
    (7, ["His story was ", " by the evidence."], ["born out", "borne out"], "borne out"),
    (7, ["The scarf was a nice ", " to her coat."], ["complement", "compliment"], "complement"),
    (8, ["The committee will ", " the new rules next week."], ["adapt", "adopt", "adept"], "adopt"),
    (8, ["He was ", " to the risks involved."], ["oblivious", "obvious"], "oblivious"),
    (8, ["She tried to ", " a response from the crowd."], ["elicit", "illicit"], "elicit"),
    (9, ["The treaty had a ", " effect on trade."], ["discrete", "discreet"], "discrete"),
    (9, ["Nobody could ", " what he meant."], ["infer", "imply"], "infer"),
    (9, ["The judge remained ", " throughout the trial."], ["uninterested", "disinterested"], "disinterested"),
    (10, ["Her ", " remarks offended nobody."], ["innocuous", "inoccuous", "innocous"], "innocuous"),
    (10, ["The plan was ", " from the start."], ["flawed", "floored"], "flawed"),
    (10, ["Travel was ", " by the storm."], ["hampered", "hammered", "pampered"], "hampered"),
]

# Word unscramble: word length -> [(word, hint)]
UNSCRAMBLE_WORDS = {
    4: [
        ("MIND", "Where thoughts live"),
        ("GAME", "Something you play"),
        ("BOOK", "Has pages"),
        ("TREE", "Has leaves and roots"),
        ("FISH", "Swims in water"),
        ("LAMP", "Gives light"),
    ],
    5: [
        ("BRAIN", "Thinking organ"),
        ("PLANT", "Grows in soil"),
        ("CLOUD", "Floats in the sky"),
        ("HOUSE", "Place to live"),
        ("TRAIN", "Runs on rails"),
        ("SMILE", "Happy expression"),
    ],
    6: [
        ("PUZZLE", "Needs solving"),
        ("MEMORY", "What you remember"),
        ("GARDEN", "Where flowers grow"),
        ("PLANET", "Orbits a star"),
        ("BRIDGE", "Crosses a river"),
        ("WINTER", "Coldest season"),
    ],
    7: [
        ("JOURNEY", "A long trip"),
        ("BALANCE", "Staying steady"),
        ("LIBRARY", "Full of books"),
        ("CAPTAIN", "Leads a ship"),
        ("FREEDOM", "Being free"),
        ("HARMONY", "Notes in agreement"),
    ],
    8: [
        ("ELEPHANT", "Largest land animal"),
        ("MOUNTAIN", "Very tall landform"),
        ("NOTEBOOK", "Paper for writing"),
        ("SQUIRREL", "Stores nuts"),
        ("DINOSAUR", "Extinct reptile"),
        ("UMBRELLA", "Keeps you dry"),
    ],
}

# Word unscramble: tier -> word length
UNSCRAMBLE_LENGTH_BY_TIER = {
    1: 4, 2: 4, 3: 5, 4: 5, 5: 6, 6: 6, 7: 7, 8: 7, 9: 8, 10: 8,
}

# Wordle: band -> five letter words
WORDLE_WORDS = {
    'common': [
        "APPLE", "HOUSE", "WATER", "LIGHT", "PLANT", "SMILE", "TABLE",
        "BREAD", "CHAIR", "MUSIC", "HAPPY", "GREEN", "STONE", "RIVER",
    ],
    'moderate': [
        "CRANE", "BLAZE", "GLOVE", "PRIDE", "SHINE", "TRACK", "FLOCK",
        "GRAPE", "SWORD", "PLUMB", "QUEST", "VIVID", "EAGER", "LEVEL",
    ],
    'rare': [
        "NYMPH", "GLYPH", "CRYPT", "FJORD", "QUALM", "SHREW", "WALTZ",
        "KNELT", "PSALM", "TRYST", "VEXED", "ZESTY", "JAZZY", "FUZZY",
    ],
}

# Wordle: tier -> band
WORDLE_BAND_BY_TIER = {
    1: 'common', 2: 'common', 3: 'common', 4: 'moderate', 5: 'moderate',
    6: 'moderate', 7: 'moderate', 8: 'rare', 9: 'rare', 10: 'rare',
}

# Odd one out: (target, distractor) glyph pairs, roughly easiest first
ODD_ONE_OUT_PAIRS = [
    ("🍎", "🍌"),
    ("🐶", "🐱"),
    ("⭐", "🌙"),
    ("🍎", "🍅"),
    ("😀", "😃"),
    ("🐻", "🐨"),
    ("🌑", "🌚"),
    ("O", "Q"),
    ("6", "9"),
    ("b", "d"),
]
