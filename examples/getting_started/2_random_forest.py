"""
Random forest classification with vote fractions and model persistence.
"""

import sys
import os
import tempfile
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from ngram_forest import SamplesDataset, RandomForest, save_model, load_model

dataset = SamplesDataset(os.path.join(os.path.dirname(__file__), '..', 'datasets', 'intents.json'))
samples = dataset.load_samples_from_json()

forest = RandomForest.create(samples, min_fraction=0.3, max_fraction=0.9, random_state=42)
print(f"Trained {len(forest)} trees, mean accuracy {forest.accuracy:.4f}")

test_messages = [
    ["hey", "everyone"],
    ["good", "night"],
    ["what", "is", "this"],
    ["lunch"]
]

print("\nVote fractions:")
print("=" * 50)
for message in test_messages:
    result = forest.probability(message)
    print(f"\n{' '.join(message)!r}")
    print(f"   No match: {result.no_match:.2f}")
    for category, fraction in result.per_category.items():
        print(f"   {category}: {fraction:.2f}")
    print(f"   Most likely: {result.most_likely}")

# Save and reload the forest
with tempfile.TemporaryDirectory() as directory:
    path = os.path.join(directory, "intents_forest.json.gz")
    save_model(forest, path)
    reloaded = load_model(path, kind="forest")
    print(f"\nReloaded forest predicts {reloaded.predict(['hey', 'everyone'])!r}")
