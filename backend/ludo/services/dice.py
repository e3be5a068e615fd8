import random
from typing import List, Optional


BASE_WEIGHTS = [15, 15, 15, 15, 15, 25]
ALL_IN_BASE_WEIGHTS = [10, 10, 10, 10, 10, 50]
REPEAT_WEIGHT = 2
SIX_SHARE = 1.5
OTHER_SHARE = 0.875


def dice_weights(all_in_base: bool, previous_final_roll: Optional[int], is_first_roll: bool) -> List[float]:
    """Return the six face weights, normalized to sum to 100.

    - All own pieces in base: 6 gets half the mass. This takes precedence
      over repeat avoidance.
    - Otherwise, on the first roll of a turn, the previous player's final
      roll drops to weight 2 and the removed weight goes to the other
      faces (6 gets 1.5x the even share, the rest 0.875x).
    """
    if all_in_base:
        weights = [float(w) for w in ALL_IN_BASE_WEIGHTS]
    else:
        weights = [float(w) for w in BASE_WEIGHTS]
        if previous_final_roll is not None and is_first_roll:
            idx = previous_final_roll - 1
            removed = weights[idx] - REPEAT_WEIGHT
            if removed > 0:
                weights[idx] = float(REPEAT_WEIGHT)
                share = removed / (len(weights) - 1)
                for i in range(len(weights)):
                    if i == idx:
                        continue
                    weights[i] += share * (SIX_SHARE if i == 5 else OTHER_SHARE)

    total = sum(weights)
    return [w / total * 100 for w in weights]


def sample_face(weights: List[float], rng=random) -> int:
    """Draw a face 1..6 from weights summing to 100.

    Subtracts each weight in face order from a uniform draw in [0, 100);
    the first face that brings the remainder to <= 0 wins.
    """
    remainder = rng.random() * 100
    for face, weight in enumerate(weights, start=1):
        remainder -= weight
        if remainder <= 0:
            return face
    # Float rounding can leave a sliver above zero
    return len(weights)


def roll_weighted_die(all_in_base: bool, previous_final_roll: Optional[int], is_first_roll: bool, rng=random) -> int:
    return sample_face(dice_weights(all_in_base, previous_final_roll, is_first_roll), rng)
