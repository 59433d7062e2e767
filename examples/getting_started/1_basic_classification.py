"""
Basic token sequence classification with a single tree.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from ngram_forest import SamplesDataset, Tree

dataset = SamplesDataset(os.path.join(os.path.dirname(__file__), '..', 'datasets', 'intents.json'))
samples = dataset.load_samples_from_json()

tree = Tree.train(samples)

print("Mined features:")
print("=" * 50)
for category, features in tree.features.items():
    print(f"{category}: {features}")
print(f"Training accuracy: {tree.accuracy:.4f}")

test_messages = [
    ["hello", "there"],
    ["see", "you", "soon"],
    ["where", "are", "you"],
    ["lunch"]
]

print("\nPredictions:")
for message in test_messages:
    print(f"  {' '.join(message)!r} -> {tree.predict(message)}")
