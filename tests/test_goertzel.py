"""
Unit tests for the Goertzel filter bank.

Checks the precomputed constants, the per-sample recursion against the
vectorized block path, and frequency selectivity on pure sines.
"""

import pytest
import numpy as np

LOW = [697, 770, 852, 941]
HIGH = [1209, 1336, 1477, 1633]


class TestFilterConstants:
    """Test coefficient precomputation."""

    def test_bin_index_rounds_to_nearest(self):
        """Verify k = int(0.5 + N*f/fs) for the DTMF low group at 8 kHz."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        bank = GoertzelFilterBank(8000, 200, LOW)

        # 17.425, 19.25, 21.3, 23.525
        assert [b.k for b in bank.buckets] == [17, 19, 21, 24]

    def test_coefficients_are_float32(self):
        """Verify coeff/sine/cosine are single precision and consistent."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        bank = GoertzelFilterBank(8000, 200, HIGH)

        for bucket in bank.buckets:
            assert isinstance(bucket.coeff, np.float32)
            assert isinstance(bucket.sine, np.float32)
            omega = 2 * np.pi * bucket.k / 200
            assert bucket.cosine == pytest.approx(np.cos(omega), abs=1e-6)
            assert bucket.sine == pytest.approx(np.sin(omega), abs=1e-6)
            assert bucket.coeff == pytest.approx(2 * np.cos(omega), abs=1e-6)

    def test_bucket_order_follows_frequency_list(self):
        """Verify buckets keep construction order."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        bank = GoertzelFilterBank(8000, 200, [941, 697, 852])
        assert bank.frequencies == (941.0, 697.0, 852.0)

    @pytest.mark.parametrize("sample_rate,block_length,freqs", [
        (0, 200, LOW),
        (8000, 0, LOW),
        (8000, 200, []),
    ])
    def test_invalid_arguments_rejected(self, sample_rate, block_length, freqs):
        """Verify nonsensical banks raise ValueError."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        with pytest.raises(ValueError):
            GoertzelFilterBank(sample_rate, block_length, freqs)


class TestRecursion:
    """Test the per-sample recursion and block processing."""

    def test_single_sample_updates_state(self):
        """Verify one sample from reset gives q1 = x, q2 = 0."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        bank = GoertzelFilterBank(8000, 200, LOW)
        bank.reset()
        bank.process_sample(0.25)

        for bucket in bank.buckets:
            assert bucket.q1 == np.float32(0.25)
            assert bucket.q2 == np.float32(0.0)

    def test_second_sample_uses_coefficient(self):
        """Verify q0 = coeff*q1 - q2 + x on the second sample."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        bank = GoertzelFilterBank(8000, 200, [697])
        bank.reset()
        bank.process_sample(1.0)
        bank.process_sample(0.5)

        bucket = bank.buckets[0]
        assert bucket.q2 == np.float32(1.0)
        assert bucket.q1 == pytest.approx(float(bucket.coeff) + 0.5, rel=1e-6)

    def test_reset_clears_state(self):
        """Verify reset() zeroes q1 and q2."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        bank = GoertzelFilterBank(8000, 200, LOW)
        for x in (0.3, -0.2, 0.9):
            bank.process_sample(x)
        bank.reset()

        for bucket in bank.buckets:
            assert bucket.q1 == 0.0
            assert bucket.q2 == 0.0

    def test_block_matches_per_sample(self, sine):
        """Verify process_block() agrees with the sample-by-sample recursion."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        samples = sine(770, 200, 8000) + sine(1336, 200, 8000, amplitude=0.3)

        per_sample = GoertzelFilterBank(8000, 200, LOW + HIGH)
        per_sample.reset()
        for x in samples:
            per_sample.process_sample(x)

        block = GoertzelFilterBank(8000, 200, LOW + HIGH)
        block.reset()
        block.process_block(samples)

        expected = per_sample.compute_relative_magnitude()
        actual = block.compute_relative_magnitude()
        np.testing.assert_allclose(actual, expected, rtol=1e-3, atol=0.1)

    def test_block_continues_from_state(self, sine):
        """Verify two half blocks equal one full block."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        samples = sine(852, 200, 8000)

        whole = GoertzelFilterBank(8000, 200, LOW)
        whole.process_block(samples)

        halves = GoertzelFilterBank(8000, 200, LOW)
        halves.process_block(samples[:100])
        halves.process_block(samples[100:])

        np.testing.assert_allclose(
            halves.compute_relative_magnitude(),
            whole.compute_relative_magnitude(),
            rtol=1e-3, atol=0.1
        )

    def test_empty_block_is_noop(self):
        """Verify an empty block leaves the state untouched."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        bank = GoertzelFilterBank(8000, 200, LOW)
        bank.process_sample(0.5)
        bank.process_block(np.array([], dtype=np.float32))

        assert bank.buckets[0].q1 == np.float32(0.5)


class TestMagnitude:
    """Test relative magnitude selectivity."""

    @pytest.mark.parametrize("frequencies", [LOW, HIGH])
    def test_monitored_sine_dominates_bank(self, frequencies, sine):
        """Verify a sine at a monitored frequency beats every other bucket by 2.5x."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        bank = GoertzelFilterBank(8000, 200, frequencies)

        for index, frequency in enumerate(frequencies):
            bank.reset()
            bank.process_block(sine(frequency, 200, 8000))
            magnitudes = bank.compute_relative_magnitude()

            target = magnitudes[index]
            others = np.delete(magnitudes, index)
            assert np.all(target > others * 2.5), (
                f"{frequency} Hz: {magnitudes.tolist()}"
            )

    def test_silence_has_zero_magnitude(self):
        """Verify an all-zero block yields zero energy everywhere."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        bank = GoertzelFilterBank(8000, 200, LOW)
        bank.reset()
        bank.process_block(np.zeros(200, dtype=np.float32))

        assert np.all(bank.compute_relative_magnitude() == 0.0)

    def test_magnitude_matches_real_imag(self, sine):
        """Verify the relative magnitude equals |real + j*imag|^2."""
        from dtmf_decoder.detection.goertzel import GoertzelFilterBank

        bank = GoertzelFilterBank(8000, 200, HIGH)
        bank.reset()
        bank.process_block(sine(1477, 200, 8000))

        magnitudes = bank.compute_relative_magnitude()
        complex_values = bank.compute_real_imag()

        np.testing.assert_allclose(
            np.abs(complex_values) ** 2, magnitudes, rtol=1e-3, atol=0.1
        )
