"""Tests for the opaque-handle boundary layer."""

import pytest

from primextract import boundary
from primextract.exceptions import BoundaryMisuseError
from primextract.pipeline import process_image


class TestHandleLifecycle:
    """Tests for create / process / read / destroy."""
    
    def test_results_match_pipeline(self, line_image, image_args):
        """Test that indexed accessors expose the pipeline output."""
        expected = process_image(*image_args(line_image))
        
        detector = boundary.create_detector()
        result = boundary.process_image(detector, *image_args(line_image))
        
        assert boundary.line_count(result) == len(expected.lines)
        assert boundary.circle_count(result) == len(expected.circles)
        assert boundary.arc_count(result) == len(expected.arcs)
        assert [boundary.line(result, i) for i in range(boundary.line_count(result))] == expected.lines
        assert [boundary.arc(result, i) for i in range(boundary.arc_count(result))] == expected.arcs
        
        boundary.destroy_result(result)
        boundary.destroy_detector(detector)
    
    def test_circle_accessor(self, circle_image, image_args):
        detector = boundary.create_detector()
        result = boundary.process_image(detector, *image_args(circle_image))
        
        assert boundary.circle_count(result) >= 1
        assert boundary.circle(result, 0).radius > 0
        
        boundary.destroy_result(result)
        boundary.destroy_detector(detector)
    
    def test_detector_reused(self, line_image, uniform_image, image_args):
        """Test that one detector serves several independent results."""
        detector = boundary.create_detector()
        first = boundary.process_image(detector, *image_args(line_image))
        second = boundary.process_image(detector, *image_args(uniform_image))
        
        assert first != second
        assert boundary.line_count(first) > 0
        assert boundary.line_count(second) == 0
        
        boundary.destroy_result(first)
        boundary.destroy_result(second)
        boundary.destroy_detector(detector)
    
    def test_no_leaked_handles(self, line_image, image_args):
        before = boundary.live_handle_count()
        
        detector = boundary.create_detector()
        result = boundary.process_image(detector, *image_args(line_image))
        assert boundary.live_handle_count() == before + 2
        
        boundary.destroy_result(result)
        boundary.destroy_detector(detector)
        assert boundary.live_handle_count() == before


class TestHandleMisuse:
    """Tests for defensive handle checks."""
    
    def test_double_destroy_detector(self):
        detector = boundary.create_detector()
        boundary.destroy_detector(detector)
        
        with pytest.raises(BoundaryMisuseError) as exc_info:
            boundary.destroy_detector(detector)
        
        assert exc_info.value.handle == detector
        assert exc_info.value.error_code == "BOUNDARY_MISUSE"
    
    def test_double_destroy_result(self, uniform_image, image_args):
        with boundary.detector_session() as detector:
            result = boundary.process_image(detector, *image_args(uniform_image))
            boundary.destroy_result(result)
            
            with pytest.raises(BoundaryMisuseError):
                boundary.destroy_result(result)
    
    def test_use_after_destroy(self, uniform_image, image_args):
        detector = boundary.create_detector()
        boundary.destroy_detector(detector)
        
        with pytest.raises(BoundaryMisuseError):
            boundary.process_image(detector, *image_args(uniform_image))
    
    def test_wrong_handle_kind(self, uniform_image, image_args):
        """Test that a detector handle cannot be read as a result."""
        with boundary.detector_session() as detector:
            with pytest.raises(BoundaryMisuseError):
                boundary.line_count(detector)
            
            with boundary.result_session(detector, *image_args(uniform_image)) as result:
                with pytest.raises(BoundaryMisuseError):
                    boundary.destroy_detector(result)
    
    def test_unknown_handle(self):
        with pytest.raises(BoundaryMisuseError):
            boundary.arc_count(-1)


class TestSessions:
    """Tests for scoped handle acquisition."""
    
    def test_sessions_release(self, line_image, image_args):
        before = boundary.live_handle_count()
        
        with boundary.detector_session() as detector:
            with boundary.result_session(detector, *image_args(line_image)) as result:
                assert boundary.line_count(result) > 0
        
        assert boundary.live_handle_count() == before
    
    def test_sessions_release_on_error(self, line_image, image_args):
        """Test that handles are released when the block raises."""
        before = boundary.live_handle_count()
        
        with pytest.raises(RuntimeError):
            with boundary.detector_session() as detector:
                with boundary.result_session(detector, *image_args(line_image)):
                    raise RuntimeError("caller failure")
        
        assert boundary.live_handle_count() == before
    
    def test_failed_processing_leaves_no_result(self):
        """Test that an invalid buffer does not allocate a result handle."""
        from primextract.exceptions import InvalidFormatError
        
        before = boundary.live_handle_count()
        
        with boundary.detector_session() as detector:
            with pytest.raises(InvalidFormatError):
                boundary.process_image(detector, b"", 4, 4, 2)
        
        assert boundary.live_handle_count() == before


class TestConcurrentRelease:
    """Tests for releasing one handle from several threads."""
    
    def test_only_one_release_wins(self):
        """Test that racing releases give one success and misuse errors, never KeyError."""
        import threading
        from primextract.boundary import HandleRegistry
        from primextract.models import GeometricPrimitives
        
        for _ in range(20):
            registry = HandleRegistry()
            handle = registry.register(GeometricPrimitives())
            barrier = threading.Barrier(8)
            outcomes = []
            
            def release():
                barrier.wait()
                try:
                    registry.release(handle, GeometricPrimitives)
                    outcomes.append("ok")
                except BoundaryMisuseError:
                    outcomes.append("misuse")
                except Exception as e:
                    outcomes.append(type(e).__name__)
            
            threads = [threading.Thread(target=release) for _ in range(8)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()
            
            assert outcomes.count("ok") == 1
            assert outcomes.count("misuse") == 7
            assert len(registry) == 0
